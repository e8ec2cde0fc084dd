#!/usr/bin/env python
"""
Run All Tests

Imports every tests/test_*.py module, runs its test_* functions in
order and prints a per-module pass count. Pass module names to run a
subset:

    python tests/run_all_tests.py
    python tests/run_all_tests.py test_models test_api_server
"""

import importlib
import sys
import time
import traceback
from pathlib import Path

TESTS_DIR = Path(__file__).parent

# Add project root and tests/ (for fakes) to path
sys.path.insert(0, str(TESTS_DIR.parent))
sys.path.insert(0, str(TESTS_DIR))


def collect(module) -> list:
    """test_* functions in definition order."""
    tests = [
        value for name, value in vars(module).items()
        if name.startswith("test_") and callable(value)
    ]
    return sorted(tests, key=lambda fn: fn.__code__.co_firstlineno)


def run_module(name: str) -> tuple[int, list[str]]:
    """Returns (passed count, failure descriptions)."""
    try:
        module = importlib.import_module(name)
    except Exception:
        return 0, [f"import failed:\n{traceback.format_exc()}"]

    passed, failures = 0, []
    for test in collect(module):
        try:
            test()
        except Exception as e:
            failures.append(f"{test.__name__}: {type(e).__name__}: {e}")
        else:
            passed += 1
    return passed, failures


def main(selected: list[str]) -> int:
    names = selected or sorted(p.stem for p in TESTS_DIR.glob("test_*.py"))

    print("\n" + "=" * 60)
    print(f" SPARKSTUDIO - {len(names)} TEST MODULES")
    print("=" * 60)

    results = {}
    for name in names:
        print(f"\n--- {name} ---")
        started = time.perf_counter()
        passed, failures = run_module(name)
        results[name] = (passed, failures, time.perf_counter() - started)

    print("\n" + "=" * 60)
    print(" SUMMARY")
    print("=" * 60 + "\n")

    total_passed = total_failed = 0
    for name, (passed, failures, elapsed) in results.items():
        status = "✅" if not failures else "❌"
        print(f"  {status} {name:<28} {passed}/{passed + len(failures)}  ({elapsed:.2f}s)")
        for failure in failures:
            print(f"       ✗ {failure}")
        total_passed += passed
        total_failed += len(failures)

    print(f"\nTests passed: {total_passed}, failed: {total_failed}")
    if total_failed == 0:
        print("\n🎉 ALL TESTS PASSED!\n")
        return 0
    print(f"\n⚠️  {total_failed} TEST(S) FAILED\n")
    return 1


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
