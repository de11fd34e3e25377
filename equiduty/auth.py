import logging
from typing import Optional

import firebase_admin
from fastapi import Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from sqlalchemy.orm import Session

from .config import FIREBASE_CREDENTIALS_PATH, FIREBASE_PROJECT_ID
from .database import get_db
from .models import User

logger = logging.getLogger(__name__)

security = HTTPBearer()

_firebase_app: Optional[firebase_admin.App] = None


def get_firebase_app() -> firebase_admin.App:
    """Initialize the Firebase Admin SDK once per process"""
    global _firebase_app
    if _firebase_app is not None:
        return _firebase_app

    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Firebase not configured")

    if FIREBASE_CREDENTIALS_PATH:
        cred = credentials.Certificate(FIREBASE_CREDENTIALS_PATH)
    else:
        cred = credentials.ApplicationDefault()

    _firebase_app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
    logger.info(f"✅ Firebase Admin initialized for project {FIREBASE_PROJECT_ID}")
    return _firebase_app


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token (signature, audience, issuer and expiry).
    Certificate fetching is blocking, so verification runs in the threadpool.
    """
    app = get_firebase_app()
    try:
        decoded = await run_in_threadpool(firebase_auth.verify_id_token, token, app)
        logger.debug(f"✅ Token verified for user: {decoded.get('email')}")
        return decoded
    except firebase_auth.ExpiredIdTokenError as e:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        ) from e
    except firebase_auth.RevokedIdTokenError as e:
        logger.warning("⚠️ Revoked token presented")
        raise HTTPException(status_code=401, detail="Token has been revoked") from e
    except (firebase_auth.InvalidIdTokenError, ValueError) as e:
        logger.warning(f"⚠️ Invalid token: {e}")
        raise HTTPException(status_code=401, detail="Invalid token") from e
    except firebase_auth.CertificateFetchError as e:
        logger.error(f"❌ Unable to fetch Firebase certificates: {e}")
        raise HTTPException(status_code=503, detail="Unable to verify token right now") from e


def find_or_create_user(db: Session, firebase_uid: str, email: Optional[str], name: str = "") -> User:
    """Look up the user for a verified token, creating the row on first sign-in"""
    user = db.query(User).filter(User.firebase_uid == firebase_uid).first()
    if user:
        return user

    if email:
        # Same e-mail signed in through another provider
        existing_user = db.query(User).filter(User.email == email.lower()).first()
        if existing_user:
            logger.info(f"🔄 Migrating user {existing_user.id} to new Firebase UID")
            existing_user.firebase_uid = firebase_uid
            db.commit()
            db.refresh(existing_user)
            return existing_user

    if not email:
        raise HTTPException(status_code=401, detail="Token is missing an email claim")

    user = User(firebase_uid=firebase_uid, email=email.lower(), full_name=name or None)
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"✅ Created user {user.id} for {user.email}")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from Firebase token"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    token = credentials.credentials
    if len(token.split(".")) != 3:
        logger.warning(f"⚠️ Malformed token received, length: {len(token)}")
        raise HTTPException(
            status_code=401, detail="Invalid token format. Expected a valid JWT token."
        )

    decoded_token = await verify_firebase_token(token)

    # Firebase ID tokens use 'sub' as the user ID claim, not 'uid'
    firebase_uid = decoded_token.get("sub") or decoded_token.get("uid")
    if not firebase_uid:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(decoded_token.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    user = find_or_create_user(db, firebase_uid, decoded_token.get("email"), decoded_token.get("name", ""))

    # System administrators are granted through a custom claim
    claimed_role = "system_admin" if decoded_token.get("role") == "system_admin" else "user"
    if user.system_role != claimed_role:
        logger.info(f"🔄 System role for user {user.id} changed to {claimed_role}")
        user.system_role = claimed_role
        db.commit()

    return user


def require_system_admin(current_user: User = Depends(get_current_user)) -> User:
    if current_user.system_role != "system_admin":
        raise HTTPException(status_code=403, detail="System administrator access required")
    return current_user
