from fastapi import FastAPI, Depends, HTTPException, Query, Request, status, UploadFile, File, Form
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID
import logging
import sys

from config import Settings, get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

# Local imports
from database import get_db, engine
from dtos.chat_request import ChatRequest, ANONYMOUS_USER
from graph import build_reply_graph, create_chat_model
from models import Base
from schemas import (
    Ok, Err,
    MessageResponse, ChatReply, ChatHistory, ApiKeyResponse, GoogleApiResponse,
    ModelProbeResponse, SearchProbeResponse,
    DocumentResponse, DocumentListResponse,
    UserCreate, UserLogin, UserResponse,
)
from services import ChatService, DocumentService, UserService, MemoryChatStore, memory_chat_store
from services.chat import fallback_counters
from services.documents import MAX_FILE_SIZE, DocumentNotPendingError
from services.providers import ProviderProbeError, probe_openai
from services.search import GoogleSearchClient, SearchProviderError
from services.storage import LocalFileStorage
from services.verification import VerificationStrategy, default_verification_strategy
from sqlalchemy.orm import Session
from sqlalchemy import text


file_storage = LocalFileStorage(settings.upload_dir)


def _build_reply_graph():
    try:
        model = create_chat_model(settings)
    except Exception as e:
        logger.error(f"Failed to initialize chat model, replies will use fallbacks: {e}")
        model = None
    return build_reply_graph(model)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The primary store is optional: chat keeps working in memory without it
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ready")
    except Exception as e:
        logger.error(f"Database unavailable at startup, chat will use in-memory storage: {e}")

    app.state.reply_graph = _build_reply_graph()

    yield

    engine.dispose()


app = FastAPI(
    title="AURA API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


# Error envelopes
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=Err(code=exc.status_code, error=str(exc.detail)).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=Err(code=status.HTTP_422_UNPROCESSABLE_ENTITY, error="; ".join(problems)).model_dump(),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=Err(code=status.HTTP_500_INTERNAL_SERVER_ERROR, error="Server Error").model_dump(),
    )


# Dependencies
def get_memory_store() -> MemoryChatStore:
    return memory_chat_store


def get_reply_graph(request: Request):
    reply_graph = getattr(request.app.state, "reply_graph", None)
    if reply_graph is None:
        reply_graph = _build_reply_graph()
        request.app.state.reply_graph = reply_graph
    return reply_graph


def get_file_storage() -> LocalFileStorage:
    return file_storage


def get_verification_strategy() -> VerificationStrategy:
    return default_verification_strategy


def get_search_client(config: Settings = Depends(get_settings)) -> GoogleSearchClient:
    return GoogleSearchClient(api_key=config.google_api_key, search_engine_id=config.search_engine_id)


def require_key_exposure(config: Settings = Depends(get_settings)) -> Settings:
    if not config.expose_provider_keys:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Provider credentials are not exposed by this server"
        )
    return config


@app.get("/")
async def root():
    return {"message": "AURA API is running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "aura-api"}


@app.get("/health/detailed")
async def detailed_health_check(
    db: Session = Depends(get_db),
    memory_store: MemoryChatStore = Depends(get_memory_store),
    config: Settings = Depends(get_settings)
):
    """Health of the primary store plus chat fallback statistics."""
    health_status = {
        "status": "healthy",
        "service": "aura-api",
        "checks": {}
    }

    # Check database connection
    try:
        db.execute(text("SELECT 1"))
        health_status["checks"]["database"] = {"status": "healthy"}
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        health_status["checks"]["database"] = {"status": "unhealthy"}
        health_status["status"] = "degraded"

    health_status["checks"]["chat_model"] = {
        "status": "configured",
        "provider": config.chat_model_provider,
        "model": config.chat_model
    }

    health_status["checks"]["chat_fallback"] = {
        "memory_threads": memory_store.thread_count(),
        "store_fallbacks": fallback_counters["store_fallbacks"],
        "reply_persist_fallbacks": fallback_counters["reply_persist_fallbacks"]
    }

    return health_status


# Chat endpoints
@app.post("/api/chat/message", response_model=Ok[ChatReply])
async def send_message(
    req: ChatRequest,
    db: Session = Depends(get_db),
    memory_store: MemoryChatStore = Depends(get_memory_store),
    reply_graph=Depends(get_reply_graph)
) -> Ok[ChatReply]:
    """Send a message and get a reply. Backend failures degrade to fallbacks instead of errors."""
    if not req.message or not req.message.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message is required"
        )

    reply = await ChatService.send_message(
        db=db,
        memory_store=memory_store,
        reply_graph=reply_graph,
        user_id=req.resolved_user_id,
        message=req.message
    )

    return Ok[ChatReply](data=ChatReply(message=reply))


@app.get("/api/chat/history", response_model=Ok[ChatHistory])
async def get_chat_history(
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db)
) -> Ok[ChatHistory]:
    """Get the stored chat history for a user."""
    messages = ChatService.get_history(db, user_id or ANONYMOUS_USER)

    return Ok[ChatHistory](
        data=ChatHistory(messages=[MessageResponse.model_validate(message) for message in messages])
    )


@app.get("/api/chat/apikey", response_model=Ok[ApiKeyResponse])
async def get_gemini_api_key(config: Settings = Depends(require_key_exposure)) -> Ok[ApiKeyResponse]:
    return Ok[ApiKeyResponse](data=ApiKeyResponse(api_key=config.gemini_api_key))


@app.get("/api/chat/openai-apikey", response_model=Ok[ApiKeyResponse])
async def get_openai_api_key(config: Settings = Depends(require_key_exposure)) -> Ok[ApiKeyResponse]:
    return Ok[ApiKeyResponse](data=ApiKeyResponse(api_key=config.openai_api_key))


@app.get("/api/chat/google-api", response_model=Ok[GoogleApiResponse])
async def get_google_api(config: Settings = Depends(require_key_exposure)) -> Ok[GoogleApiResponse]:
    return Ok[GoogleApiResponse](
        data=GoogleApiResponse(api_key=config.google_api_key, search_engine_id=config.search_engine_id)
    )


@app.get("/api/chat/test-openai", response_model=Ok[ModelProbeResponse])
async def test_openai(config: Settings = Depends(get_settings)) -> Ok[ModelProbeResponse]:
    """Check connectivity to the OpenAI API."""
    try:
        result = await probe_openai(config)
    except ProviderProbeError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return Ok[ModelProbeResponse](data=ModelProbeResponse(**result))


@app.get("/api/chat/test-google-search", response_model=Ok[SearchProbeResponse])
async def test_google_search(
    q: str = Query("government documents", min_length=1),
    search_client: GoogleSearchClient = Depends(get_search_client)
) -> Ok[SearchProbeResponse]:
    """Check connectivity to the Google Custom Search API."""
    try:
        result = await search_client.probe(q)
    except SearchProviderError as e:
        logger.error(f"Google Search probe failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Google Search connectivity check failed"
        )

    return Ok[SearchProbeResponse](data=SearchProbeResponse(**result))


# Document endpoints
@app.post("/api/documents", response_model=Ok[DocumentResponse], status_code=status.HTTP_201_CREATED)
async def upload_document(
    file: Optional[UploadFile] = File(None),
    title: str = Form(..., min_length=1, max_length=100),
    description: str = Form(..., min_length=1, max_length=500),
    department: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None, alias="userId"),
    db: Session = Depends(get_db),
    storage: LocalFileStorage = Depends(get_file_storage)
) -> Ok[DocumentResponse]:
    """
    Upload a document and record its metadata.

    Maximum file size: 10MB
    """
    if file is None or not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please upload a file"
        )

    title = title.strip()
    description = description.strip()
    if not title:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Title is required"
        )
    if not description:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Description is required"
        )

    # Read file content
    file_content = await file.read()
    file_size = len(file_content)

    if file_size > MAX_FILE_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size exceeds maximum allowed size of {MAX_FILE_SIZE // 1024 // 1024}MB"
        )

    # Reset file position for storage
    await file.seek(0)

    try:
        document = DocumentService.upload_document(
            db=db,
            storage=storage,
            user_id=user_id or ANONYMOUS_USER,
            filename=file.filename,
            file_data=file.file,
            file_size=file_size,
            content_type=file.content_type or "application/octet-stream",
            title=title,
            description=description,
            department=department.strip() if department else None
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )

    if not document:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to store document"
        )

    return Ok[DocumentResponse](data=DocumentResponse.model_validate(document))


@app.get("/api/documents", response_model=Ok[DocumentListResponse])
async def list_documents(
    user_id: Optional[str] = Query(None, alias="userId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
) -> Ok[DocumentListResponse]:
    """List all documents owned by a user."""
    owner = user_id or ANONYMOUS_USER

    documents = DocumentService.get_user_documents(
        db=db,
        user_id=owner,
        skip=skip,
        limit=limit
    )

    total = DocumentService.count_user_documents(db, owner)

    return Ok[DocumentListResponse](data=DocumentListResponse(
        documents=[DocumentResponse.model_validate(doc) for doc in documents],
        total=total,
        page=(skip // limit) + 1,
        page_size=limit
    ))


@app.get("/api/documents/{document_id}", response_model=Ok[DocumentResponse])
async def get_document(
    document_id: UUID,
    db: Session = Depends(get_db)
) -> Ok[DocumentResponse]:
    """Get metadata for a specific document."""
    document = DocumentService.get_document(db=db, document_id=document_id)

    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    return Ok[DocumentResponse](data=DocumentResponse.model_validate(document))


@app.put("/api/documents/{document_id}/verify", response_model=Ok[DocumentResponse])
async def verify_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    strategy: VerificationStrategy = Depends(get_verification_strategy)
) -> Ok[DocumentResponse]:
    """Run (simulated) verification on a pending document."""
    try:
        document = DocumentService.verify_document(
            db=db,
            document_id=document_id,
            strategy=strategy
        )
    except DocumentNotPendingError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )

    return Ok[DocumentResponse](data=DocumentResponse.model_validate(document))


# User endpoints
@app.post("/api/users/register", response_model=Ok[UserResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    db: Session = Depends(get_db)
) -> Ok[UserResponse]:
    """Register a new user."""
    if UserService.get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    user = UserService.create_user(db, user_data)

    return Ok[UserResponse](data=UserResponse.model_validate(user))


@app.post("/api/users/login", response_model=Ok[UserResponse])
async def login_user(
    credentials: UserLogin,
    db: Session = Depends(get_db)
) -> Ok[UserResponse]:
    """Check email and password. No token or session is issued."""
    user = UserService.authenticate_user(db, credentials.email, credentials.password)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )

    return Ok[UserResponse](data=UserResponse.model_validate(user))


@app.get("/api/users/{user_id}", response_model=Ok[UserResponse])
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db)
) -> Ok[UserResponse]:
    """Get a user by ID."""
    user = UserService.get_user_by_id(db, user_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return Ok[UserResponse](data=UserResponse.model_validate(user))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
