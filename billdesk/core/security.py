# billdesk/core/security.py
import logging
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from billdesk.core.config import settings


logger = logging.getLogger(__name__)


class SecurityUtils:

    # ---------------- JWT ----------------
    @staticmethod
    def verify_identity_token(token: str) -> Optional[Dict[str, Any]]:
        """
        Decode a token issued by the identity provider.
        Returns None for anything that does not verify.
        """
        options = {"verify_aud": settings.IDP_AUDIENCE is not None}
        try:
            return jwt.decode(
                token,
                settings.IDP_SECRET_KEY,
                algorithms=[settings.IDP_ALGORITHM],
                audience=settings.IDP_AUDIENCE,
                issuer=settings.IDP_ISSUER,
                options=options,
            )
        except JWTError as e:
            logger.info("Rejected identity token: %s", e)
            return None
