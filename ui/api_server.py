"""
API Server for SparkStudio.

This FastAPI server provides:
1. AI generation endpoints backed by one shared AIController
2. Challenge and submission endpoints backed by Supabase
3. Form validation for the signup screen

Services are created lazily from config on first use and cached on
`app.state`; tests (or an embedding app) can pre-set them there.

Run with: uvicorn api_server:app --reload --port 8000
"""

import json
import logging
import os
import time
import uuid
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field
from supabase import AuthError as SupabaseAuthError

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import (
    AI_BACKEND,
    DEFAULT_MAX_TOKENS,
    DEFAULT_STYLE,
    DEFAULT_TEMPERATURE,
    LOGS_DIR,
    SPARKSTUDIO_API_VERSION,
    SUPABASE_ANON_KEY,
    SUPABASE_URL,
    get_supabase_client,
)
from agent.controller import AIController
from core import validators
from data import (
    ChallengeRepository,
    RepositoryError,
    SubmissionRepository,
    SupabaseClientManager,
)
from models.ai import AIException, AIModel
from models.creative import CreativeSubmission, CreativeType
from skills import (
    ChallengeGenerator,
    ContentGenerator,
    GeminiContentGenerator,
    MockContentGenerator,
    list_skills,
)

# =============================================================================
# Setup Logging - File + Console
# =============================================================================

LOGS_DIR.mkdir(exist_ok=True)

_session_start = time.strftime("%Y%m%d_%H%M%S")
_log_file = LOGS_DIR / f"server_{_session_start}.log"

# force=True overrides handlers installed by config / uvicorn
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.FileHandler(_log_file, mode="a"),
        logging.StreamHandler(),
    ],
    force=True,
)
logger = logging.getLogger("api_server")
logger.info(f"Server session started. Log file: {_log_file}")

app = FastAPI(
    title="SparkStudio API",
    description="Daily creative challenges with AI-assisted content",
    version=SPARKSTUDIO_API_VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# AI error code -> HTTP status returned to our own clients
STATUS_FOR_ERROR_CODE = {
    "INVALID_REQUEST": 400,
    "RATE_LIMITED": 429,
    "SERVICE_UNAVAILABLE": 503,
}


# =============================================================================
# Dependencies
# =============================================================================


def build_ai_service():
    """Content generator for the configured AI_BACKEND."""
    if AI_BACKEND == "gemini":
        return GeminiContentGenerator()
    if AI_BACKEND == "mock":
        return MockContentGenerator(delay_seconds=0.5)
    return ContentGenerator()


def _state(request: Request, name: str, factory):
    value = getattr(request.app.state, name, None)
    if value is None:
        value = factory()
        setattr(request.app.state, name, value)
    return value


def _supabase_client():
    manager = SupabaseClientManager()
    if not manager.is_initialized:
        if not (SUPABASE_URL and SUPABASE_ANON_KEY):
            raise HTTPException(status_code=503, detail="Supabase is not configured")
        try:
            manager.initialize(SUPABASE_URL, SUPABASE_ANON_KEY)
        except RuntimeError as e:
            raise HTTPException(status_code=503, detail=str(e))
    return manager.client


def user_client(access_token: str):
    """
    A fresh Supabase client whose table requests run as the token's user,
    so row-level security sees auth.uid().
    """
    client = get_supabase_client()
    client.postgrest.auth(access_token)
    return client


def get_ai_service(request: Request):
    try:
        return _state(request, "ai_service", build_ai_service)
    except ValueError as e:
        # Missing API key for the selected backend
        raise HTTPException(status_code=503, detail=str(e))


def get_controller(request: Request) -> AIController:
    return _state(request, "controller", lambda: AIController(get_ai_service(request)))


def get_challenge_generator(request: Request) -> ChallengeGenerator:
    return _state(
        request, "challenge_generator", lambda: ChallengeGenerator(get_ai_service(request))
    )


def get_challenge_repository(request: Request) -> ChallengeRepository:
    return _state(
        request, "challenge_repository", lambda: ChallengeRepository(_supabase_client())
    )


def get_submission_repository(request: Request) -> SubmissionRepository:
    return _state(
        request, "submission_repository", lambda: SubmissionRepository(_supabase_client())
    )


def get_user_session(request: Request, authorization: Optional[str] = Header(None)):
    """
    Resolve `Authorization: Bearer <access token>` to (user, user-scoped client).

    The client factory can be swapped via `app.state.user_client_factory`.
    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = token.strip()

    factory = getattr(request.app.state, "user_client_factory", None) or user_client
    try:
        client = factory(token)
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))

    try:
        response = client.auth.get_user(token)
    except SupabaseAuthError as e:
        logger.warning(f"Rejected access token: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    if response is None or response.user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return response.user, client


def _ai_error(e: AIException) -> HTTPException:
    status = STATUS_FOR_ERROR_CODE.get(e.error_code, 502)
    return HTTPException(status_code=status, detail=str(e))


def _check_prompt(prompt: str) -> None:
    error = validators.ai_prompt_validator(prompt)
    if error:
        raise HTTPException(status_code=400, detail=error)


# =============================================================================
# Request Models
# =============================================================================


class GenerateRequest(BaseModel):
    prompt: str
    style: str = DEFAULT_STYLE
    temperature: float = Field(DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    max_tokens: int = Field(DEFAULT_MAX_TOKENS, gt=0, le=4000)
    model: Optional[str] = None  # AIModel value, e.g. "llama-3-70b"


class VariationsRequest(BaseModel):
    prompt: str
    style: str = DEFAULT_STYLE
    count: int = Field(3, ge=1, le=5)


class ImageRequest(BaseModel):
    prompt: str
    style: str = DEFAULT_STYLE


class EnhanceRequest(BaseModel):
    text: str
    style: str = DEFAULT_STYLE


class IdeasRequest(BaseModel):
    theme: str
    count: int = Field(5, ge=1, le=10)


class SignupForm(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    confirm_password: Optional[str] = None
    username: Optional[str] = None
    display_name: Optional[str] = None


class DraftChallengesRequest(BaseModel):
    type: str = "text"
    count: int = Field(3, ge=1, le=10)
    duration_days: int = Field(1, ge=1, le=30)
    difficulty: int = Field(3, ge=1, le=5)


class SubmissionCreate(BaseModel):
    prompt_id: str
    user_display_name: str = "Anonymous"
    type: str = "text"
    text_content: Optional[str] = None
    content_url: Optional[str] = None
    ai_style: Optional[str] = None
    ai_generated_content: Optional[str] = None
    tags: list[str] = []
    is_public: bool = True


# =============================================================================
# Health / metadata
# =============================================================================


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "ai_backend": AI_BACKEND,
        "version": SPARKSTUDIO_API_VERSION,
    }


@app.get("/api/skills")
async def skills():
    return {"skills": list_skills()}


# =============================================================================
# AI Generation
# =============================================================================


@app.post("/api/generate")
async def generate(request: GenerateRequest, controller: AIController = Depends(get_controller)):
    """Generate one piece of content; it becomes the controller's current response."""
    _check_prompt(request.prompt)
    model = AIModel.from_value(request.model) if request.model else None
    try:
        await controller.generate_content(
            prompt=request.prompt,
            style=request.style,
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            model=model,
        )
    except AIException as e:
        raise _ai_error(e)
    return controller.current_response.to_dict()


@app.post("/api/generate/variations")
async def generate_variations(
    request: VariationsRequest, controller: AIController = Depends(get_controller)
):
    _check_prompt(request.prompt)
    try:
        variations = await controller.generate_variations(
            request.prompt, style=request.style, count=request.count
        )
    except AIException as e:
        raise _ai_error(e)
    return {"variations": [v.to_dict() for v in variations]}


@app.post("/api/generate/image")
async def generate_image(request: ImageRequest, controller: AIController = Depends(get_controller)):
    _check_prompt(request.prompt)
    try:
        url = await controller.generate_image(request.prompt, style=request.style)
    except AIException as e:
        raise _ai_error(e)
    return {"url": url}


@app.post("/api/generate/enhance")
async def enhance_text(request: EnhanceRequest, controller: AIController = Depends(get_controller)):
    error = validators.creative_content_validator(request.text)
    if error:
        raise HTTPException(status_code=400, detail=error)
    try:
        await controller.enhance_text(request.text, style=request.style)
    except AIException as e:
        raise _ai_error(e)
    return controller.current_response.to_dict()


@app.post("/api/generate/ideas")
async def generate_ideas(request: IdeasRequest, controller: AIController = Depends(get_controller)):
    if not request.theme.strip():
        raise HTTPException(status_code=400, detail="Theme is required")
    try:
        ideas = await controller.generate_ideas(request.theme, count=request.count)
    except AIException as e:
        raise _ai_error(e)
    return {"ideas": ideas}


@app.post("/api/generate/stream")
async def generate_stream(request: GenerateRequest, controller: AIController = Depends(get_controller)):
    """Stream generated content as SSE; ends with `data: [DONE]`."""
    _check_prompt(request.prompt)
    model = AIModel.from_value(request.model) if request.model else None

    async def stream_events():
        try:
            async for response in controller.stream_content(
                prompt=request.prompt,
                style=request.style,
                temperature=request.temperature,
                max_tokens=request.max_tokens,
                model=model,
            ):
                yield f"data: {json.dumps(response.to_dict())}\n\n"
        except AIException as e:
            logger.error(f"[STREAM] {e}")
            yield f"data: {json.dumps({'type': 'error', 'error_code': e.error_code, 'message': e.message})}\n\n"
        yield "data: [DONE]\n\n"

    return StreamingResponse(
        stream_events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@app.get("/api/ai/state")
async def ai_state(controller: AIController = Depends(get_controller)):
    return controller.snapshot()


@app.delete("/api/ai/history")
async def clear_history(controller: AIController = Depends(get_controller)):
    controller.clear_history()
    return controller.snapshot()


@app.delete("/api/ai/recent-prompts")
async def clear_recent_prompts(controller: AIController = Depends(get_controller)):
    controller.clear_recent_prompts()
    return controller.snapshot()


# =============================================================================
# Validation
# =============================================================================


@app.post("/api/validate/signup")
async def validate_signup(form: SignupForm):
    errors = validators.validate_signup(
        email=form.email,
        password=form.password,
        confirm_password=form.confirm_password,
        username=form.username,
        display_name=form.display_name,
    )
    return {"valid": validators.is_form_valid(errors), "errors": errors}


# =============================================================================
# Challenges
# (sync handlers: the Supabase client blocks, FastAPI runs these in its threadpool)
# =============================================================================


@app.get("/api/challenges")
def list_challenges(
    type: Optional[str] = None,
    q: Optional[str] = None,
    repo: ChallengeRepository = Depends(get_challenge_repository),
):
    if q:
        challenges = repo.search_challenges(q)
    elif type:
        challenges = repo.get_challenges_by_type(CreativeType.from_name(type))
    else:
        challenges = repo.get_all_challenges()
    return {"challenges": [c.to_row() for c in challenges]}


@app.get("/api/challenges/today")
def todays_challenge(repo: ChallengeRepository = Depends(get_challenge_repository)):
    challenge = repo.get_todays_challenge()
    if challenge is None:
        raise HTTPException(status_code=404, detail="No active challenge")
    return challenge.to_row()


@app.get("/api/challenges/trending")
def trending_challenges(
    limit: int = Query(5, ge=1, le=50),
    repo: ChallengeRepository = Depends(get_challenge_repository),
):
    return {"challenges": [c.to_row() for c in repo.get_trending_challenges(limit)]}


@app.post("/api/challenges/drafts")
async def draft_challenges(
    request: DraftChallengesRequest,
    generator: ChallengeGenerator = Depends(get_challenge_generator),
):
    """AI-drafted challenges for review. Nothing is saved."""
    try:
        drafts = await generator.draft_challenges(
            CreativeType.from_name(request.type),
            count=request.count,
            duration_days=request.duration_days,
            difficulty=request.difficulty,
        )
    except AIException as e:
        raise _ai_error(e)
    return {"drafts": [d.to_row() for d in drafts]}


@app.get("/api/challenges/{challenge_id}")
def get_challenge(challenge_id: str, repo: ChallengeRepository = Depends(get_challenge_repository)):
    challenge = repo.get_challenge(challenge_id)
    if challenge is None:
        raise HTTPException(status_code=404, detail=f"Challenge not found: {challenge_id}")
    return challenge.to_row()


# =============================================================================
# Submissions
# =============================================================================


@app.get("/api/submissions")
def list_submissions(
    challenge_id: Optional[str] = None,
    user_id: Optional[str] = None,
    type: Optional[str] = None,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    repo: SubmissionRepository = Depends(get_submission_repository),
):
    submissions = repo.fetch_submissions(
        challenge_id=challenge_id,
        user_id=user_id,
        creative_type=CreativeType.from_name(type) if type else None,
        limit=limit,
        offset=offset,
    )
    return {"submissions": [s.to_row() for s in submissions]}


@app.post("/api/submissions", status_code=201)
def create_submission(payload: SubmissionCreate, session=Depends(get_user_session)):
    """Insert a submission owned by the caller; the token decides user_id."""
    user, client = session
    if not (payload.text_content or payload.content_url):
        raise HTTPException(status_code=400, detail="Submission needs text or media")
    if payload.text_content is not None:
        error = validators.creative_content_validator(payload.text_content)
        if error:
            raise HTTPException(status_code=400, detail=error)
    for tag in payload.tags:
        error = validators.hashtag_validator(tag)
        if error:
            raise HTTPException(status_code=400, detail=f"{tag}: {error}")

    submission = CreativeSubmission(
        id=str(uuid.uuid4()),
        prompt_id=payload.prompt_id,
        user_id=user.id,
        user_display_name=payload.user_display_name,
        type=CreativeType.from_name(payload.type),
        text_content=payload.text_content,
        content_url=payload.content_url,
        ai_style=payload.ai_style,
        ai_generated_content=payload.ai_generated_content,
        tags=payload.tags,
        is_public=payload.is_public,
    )
    try:
        SubmissionRepository(client).add_submission(submission)
    except RepositoryError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return submission.to_row()


if __name__ == "__main__":
    import uvicorn

    print("\n" + "=" * 60)
    print("SparkStudio API Server")
    print("=" * 60)
    print(f"AI Backend: {AI_BACKEND}")
    print(f"API Docs: http://localhost:8000/docs")
    print("=" * 60 + "\n")

    is_production = os.getenv("SPARKSTUDIO_ENV") == "production"
    uvicorn.run(
        "api_server:app",
        app_dir=str(Path(__file__).parent),
        host="0.0.0.0",
        port=8000,
        reload=not is_production,
        workers=2 if is_production else 1,
    )
