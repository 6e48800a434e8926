import logging

from fastapi import APIRouter, Depends, Query

from salon_booking.api.v1.errors import translate_errors
from salon_booking.api.v1.schemas import (
    LoginUrlSchema,
    MeResponseSchema,
    OnboardingSchema,
    ProfileSchema,
    ProfileUpdateSchema,
    SessionRequestSchema,
    UserSchema,
    profile_schema,
)
from salon_booking.application.use_cases.session_context import SessionContext
from salon_booking.core.config import settings
from salon_booking.domain.entities.profile import ProfileUpdate
from salon_booking.wiring.dependencies import get_session_context

router = APIRouter()
logger = logging.getLogger(__name__)


def _me(ctx: SessionContext) -> MeResponseSchema:
    user = ctx.user
    return MeResponseSchema(
        user=UserSchema(id=user.id, email=user.email, full_name=user.full_name) if user else None,
        profile=profile_schema(ctx.profile) if ctx.profile else None,
        needs_onboarding=ctx.needs_onboarding,
        is_admin=ctx.is_admin,
    )


@router.get("/auth/login", response_model=LoginUrlSchema)
def login_url(
    redirect_to: str | None = Query(None),
    ctx: SessionContext = Depends(get_session_context),
):
    url = ctx.sign_in_url(settings.OAUTH_PROVIDER, redirect_to or settings.OAUTH_REDIRECT_URL)
    return LoginUrlSchema(url=url)


@router.post("/auth/session", response_model=MeResponseSchema)
def create_session(
    req: SessionRequestSchema,
    ctx: SessionContext = Depends(get_session_context),
):
    with translate_errors():
        ctx.sign_in_with_tokens(req.access_token, req.refresh_token)
    # profile creation on first sign in runs in the background
    ctx.wait_for_background()
    return _me(ctx)


@router.post("/auth/logout")
def logout(ctx: SessionContext = Depends(get_session_context)):
    with translate_errors():
        ctx.require_user()
        ctx.sign_out()
    return {"status": "signed_out"}


@router.get("/me", response_model=MeResponseSchema)
def me(ctx: SessionContext = Depends(get_session_context)):
    with translate_errors():
        ctx.require_user()
    return _me(ctx)


@router.put("/me/profile", response_model=ProfileSchema)
def update_profile(
    req: ProfileUpdateSchema,
    ctx: SessionContext = Depends(get_session_context),
):
    with translate_errors():
        profile = ctx.update_profile(
            ProfileUpdate(
                full_name=req.full_name,
                phone_number=req.phone_number,
                instagram_id=req.instagram_id,
                gender=req.gender.value if req.gender else None,
            )
        )
    return profile_schema(profile)


@router.post("/me/onboarding", response_model=ProfileSchema)
def complete_onboarding(
    req: OnboardingSchema,
    ctx: SessionContext = Depends(get_session_context),
):
    with translate_errors():
        profile = ctx.update_profile(
            ProfileUpdate(
                full_name=req.full_name,
                phone_number=req.phone_number,
                instagram_id=req.instagram_id,
                gender=req.gender.value if req.gender else None,
            ),
            complete_onboarding=True,
        )
    logger.info("Onboarding completed", extra={"user_id": profile.id})
    return profile_schema(profile)
