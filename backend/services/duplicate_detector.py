"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  LEADBANK CRM - Duplicate Identity Resolver                                  ║
║                                                                              ║
║  CASCADE (first applicable rule decides):                                    ║
║  1. name + email present  -> same name AND same email                        ║
║  2. name + company, no email -> same name AND same company                   ║
║  3. name only             -> same name on a record with NO email/company     ║
║                                                                              ║
║  Comparison: lowercase + trim, whole-string (never substring)                ║
║                                                                              ║
║  USED BY:                                                                    ║
║  - single contact creation (conflict)                                        ║
║  - databank import (skip with reason)                                        ║
║  - strict bulk import (rows without email)                                   ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from typing import Optional, Dict, Any

from services.text_matching import normalize, exact_ci_regex

logger = logging.getLogger("duplicate_detector")

RULE_NAME_EMAIL = "name_email"
RULE_NAME_COMPANY = "name_company"
RULE_NAME_ONLY = "name_only"

_BLANK = {"$in": ["", None]}


class DuplicateResult:
    """Result of an identity check"""

    def __init__(
        self,
        is_duplicate: bool,
        rule: Optional[str] = None,
        reason: str = "",
        existing: Optional[Dict[str, Any]] = None
    ):
        self.is_duplicate = is_duplicate
        self.rule = rule
        self.reason = reason
        self.existing = existing

    @property
    def existing_id(self) -> Optional[str]:
        return (self.existing or {}).get("id")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_duplicate": self.is_duplicate,
            "rule": self.rule,
            "reason": self.reason,
            "existing": self.existing
        }


def identity_predicate(name, email=None, company=None) -> Optional[tuple]:
    """
    (rule, store predicate) for a candidate, or None when no rule applies
    (no name at all).
    """
    n_name = normalize(name)
    n_email = normalize(email)
    n_company = normalize(company)

    if not n_name:
        return None

    if n_email:
        return RULE_NAME_EMAIL, {
            "name": exact_ci_regex(n_name),
            "email": exact_ci_regex(n_email)
        }

    if n_company:
        return RULE_NAME_COMPANY, {
            "name": exact_ci_regex(n_name),
            "company": exact_ci_regex(n_company)
        }

    return RULE_NAME_ONLY, {
        "name": exact_ci_regex(n_name),
        "email": _BLANK,
        "company": _BLANK
    }


def _reason(rule: str, name, email, company, for_import: bool) -> str:
    if rule == RULE_NAME_EMAIL:
        if for_import:
            return f'Name "{name}" and email "{email}" combination already exists'
        return f'A contact with name "{name}" and email "{email}" already exists'
    if rule == RULE_NAME_COMPANY:
        if for_import:
            return f'Name "{name}" and company "{company}" combination already exists'
        return f'A contact with name "{name}" and company "{company}" already exists'
    if for_import:
        return f'Name "{name}" already exists (no email or company provided)'
    return f'A contact with name "{name}" already exists (no email or company provided)'


async def check_duplicate(
    contact_store,
    name,
    email=None,
    company=None,
    for_import: bool = False
) -> DuplicateResult:
    """
    Main identity check.

    Args:
        contact_store: ContactStore (find_one)
        name, email, company: raw candidate values
        for_import: reason wording for import reports

    Returns:
        DuplicateResult with is_duplicate=True and the matched record
    """
    resolved = identity_predicate(name, email, company)
    if resolved is None:
        return DuplicateResult(is_duplicate=False)

    rule, predicate = resolved
    existing = await contact_store.find_one(predicate)
    if not existing:
        return DuplicateResult(is_duplicate=False, rule=rule)

    name = (name or "").strip()
    email = (email or "").strip()
    company = (company or "").strip()
    logger.info(f"[DUPLICATE] rule={rule} name={name!r} existing={existing.get('id')}")
    return DuplicateResult(
        is_duplicate=True,
        rule=rule,
        reason=_reason(rule, name, email, company, for_import),
        existing=existing
    )
