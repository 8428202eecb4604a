# billdesk/core/audit.py
import logging
from typing import Any, Optional

logger = logging.getLogger("audit")


def audit_log(
    action: str,
    entity: str,
    entity_id: Optional[int],
    actor_id: Optional[str],
    metadata: Optional[dict[str, Any]] = None,
    ip_address: Optional[str] = None,
):
    """One line per business write on the `audit` logger."""
    logger.info(
        "AUDIT | %s | %s:%s | actor=%s ip=%s | %s",
        action,
        entity,
        entity_id,
        actor_id or "system",
        ip_address or "-",
        metadata or {},
    )
