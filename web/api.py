"""API route handlers for the Prefscale backend"""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool

from prefscale.app import PrefscaleApp
from prefscale.models.blog import Blog
from prefscale.models.token import Identity
from prefscale.utils.exceptions import PrefscaleError, StorageUnavailable
from prefscale.utils.logger import get_logger
from web.auth_deps import get_backend, require_admin, require_auth
from web.models import ContactRequest, LoginRequest, LoginResponse, MessageResponse, SignupRequest

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["api"])
auth_router = APIRouter(prefix="/api", tags=["auth"])


@router.get("/health")
async def health_check():
    return {"status": "ok"}


# ---------------- Auth ----------------

@auth_router.post("/signup", response_model=MessageResponse)
async def signup(payload: SignupRequest, backend: PrefscaleApp = Depends(get_backend)):
    """Create a user account (role "user"). Does not log in."""
    return await backend.credentials.register(
        name=payload.name,
        company=payload.company,
        email=payload.email,
        password=payload.password,
    )


@auth_router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
async def login(payload: LoginRequest, backend: PrefscaleApp = Depends(get_backend)):
    """Log in as the configured admin or a stored user"""
    result = await backend.credentials.authenticate(payload.email, payload.password)
    return result.as_dict()


@auth_router.get("/me")
async def me(identity: Identity = Depends(require_auth)):
    """Identity carried by the presented token"""
    return {"role": identity.role.value, "id": identity.subject, "email": identity.email}


# ---------------- Contact ----------------

@router.post("/contact", response_model=MessageResponse)
async def contact(payload: ContactRequest, backend: PrefscaleApp = Depends(get_backend)):
    try:
        return await run_in_threadpool(
            backend.contacts.submit,
            payload.name,
            payload.email,
            payload.message,
            payload.company,
        )
    except StorageUnavailable as e:
        logger.error("Contact error", error=str(e))
        raise StorageUnavailable("Failed to send message")
    except PrefscaleError:
        raise
    except Exception as e:
        logger.exception("Contact error", error=str(e))
        raise StorageUnavailable("Failed to send message")


# ---------------- Blogs ----------------

@router.post("/admin/blog", response_model=Blog)
async def upload_blog(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    section: Optional[str] = Form(None),
    content: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    admin: Identity = Depends(require_admin),
    backend: PrefscaleApp = Depends(get_backend),
):
    """Upload a blog file (pdf/doc/docx) and/or rich-text body. Admin only."""
    try:
        return await run_in_threadpool(
            backend.blogs.upload,
            title=title,
            description=description,
            category=category,
            section=section,
            content=content,
            file=file.file if file is not None else None,
            filename=file.filename if file is not None else None,
            uploaded_by=backend.settings.admin_email or "Admin",
        )
    except StorageUnavailable as e:
        logger.error("Upload error", error=str(e))
        raise StorageUnavailable("Upload failed")
    except PrefscaleError:
        raise
    except Exception as e:
        logger.exception("Upload error", error=str(e))
        raise StorageUnavailable("Upload failed")


@router.delete("/admin/blog/{blog_id}", response_model=MessageResponse)
async def delete_blog(
    blog_id: str,
    admin: Identity = Depends(require_admin),
    backend: PrefscaleApp = Depends(get_backend),
):
    try:
        return await run_in_threadpool(backend.blogs.delete, blog_id)
    except StorageUnavailable as e:
        logger.error("Delete error", blog_id=blog_id, error=str(e))
        raise StorageUnavailable("Delete failed")
    except PrefscaleError:
        raise
    except Exception as e:
        logger.exception("Delete error", blog_id=blog_id, error=str(e))
        raise StorageUnavailable("Delete failed")


@router.get("/blogs", response_model=List[Blog])
async def list_blogs(
    section: Optional[str] = None,
    category: Optional[str] = None,
    backend: PrefscaleApp = Depends(get_backend),
):
    """Blogs newest first, optionally filtered by section and category"""
    try:
        return await run_in_threadpool(backend.blogs.list, section, category)
    except StorageUnavailable as e:
        logger.error("Fetch error", error=str(e))
        raise StorageUnavailable("Failed to fetch blogs")
    except PrefscaleError:
        raise
    except Exception as e:
        logger.exception("Fetch error", error=str(e))
        raise StorageUnavailable("Failed to fetch blogs")
