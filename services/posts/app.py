from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from auditorium.config import get_settings
from auditorium.database import Base, engine
from auditorium.dependencies import Principal, get_current_principal, get_post_repository
from auditorium.errors import add_error_handlers
from auditorium.logging_middleware import add_audit_middleware
from auditorium.posts import PostRepository
from auditorium.rate_limit import apply_rate_limiter, limiter
from auditorium.schemas import Post, PostForm, Profile, ProfileUpdate

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Auditorium Updates", version="1.0.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    add_audit_middleware(fastapi_app, "posts")
    add_error_handlers(fastapi_app)
    Instrumentator().instrument(fastapi_app).expose(fastapi_app, include_in_schema=False)
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "posts"}


@app.get("/posts", response_model=List[Post])
@limiter.limit("60/minute")
def list_posts(
    request: Request,
    _: Principal = Depends(get_current_principal),
    posts: PostRepository = Depends(get_post_repository),
) -> List[Post]:
    return posts.list()


@app.post("/posts", response_model=Post, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def create_post(
    request: Request,
    post_in: PostForm,
    principal: Principal = Depends(get_current_principal),
    posts: PostRepository = Depends(get_post_repository),
) -> Post:
    return posts.create(post_in, principal.id)


@app.put("/posts/{post_id}", response_model=Post)
@limiter.limit("20/minute")
def update_post(
    request: Request,
    post_id: str,
    post_in: PostForm,
    principal: Principal = Depends(get_current_principal),
    posts: PostRepository = Depends(get_post_repository),
) -> Post:
    return posts.update(post_id, post_in, principal.id)


@app.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("20/minute")
def delete_post(
    request: Request,
    post_id: str,
    principal: Principal = Depends(get_current_principal),
    posts: PostRepository = Depends(get_post_repository),
) -> None:
    posts.delete(post_id, principal.id)


@app.get("/profiles/me", response_model=Profile)
def read_my_profile(
    principal: Principal = Depends(get_current_principal),
    posts: PostRepository = Depends(get_post_repository),
) -> Profile:
    return posts.get_profile(principal.id, email=principal.email)


@app.put("/profiles/me", response_model=Profile)
@limiter.limit("10/minute")
def update_my_profile(
    request: Request,
    profile_in: ProfileUpdate,
    principal: Principal = Depends(get_current_principal),
    posts: PostRepository = Depends(get_post_repository),
) -> Profile:
    return posts.upsert_profile(principal.id, profile_in, email=principal.email)
