# accounts/registration.py
"""
Self-service registration.

Steps, in order:
1. Reject duplicate company name / phone number / email (no external call yet)
2. Look up the fixed "customer" role
3. Create the merchant account at Airwallex
4. Create the Company with the returned account id
5. Create the User linked to company and role (password hashed)

Steps 4 and 5 share one transaction. Each step outcome is recorded on a
RegistrationAttempt; a local failure after step 3 leaves the attempt
ORPHANED with the external account id so reconcile_registrations can
surface it.
"""

import logging

from django.contrib.auth import get_user_model
from django.db import DatabaseError, transaction
from django.utils import timezone

from accounts.models import CUSTOMER_ROLE, RegistrationAttempt, Role
from companies.models import Company
from magnaporta_backend.results import CommandResult, ErrorKind
from payments.client import AirwallexError, get_airwallex_client

logger = logging.getLogger(__name__)

User = get_user_model()


def build_account_request(company_name: str, email: str, ip_address: str = "", user_agent: str = "") -> dict:
    return {
        "account_details": {
            "business_details": {
                "business_name": company_name,
            },
        },
        "customer_agreements": {
            "agreed_to_data_usage": True,
            "agreed_to_terms_and_conditions": True,
            "terms_and_conditions": {
                "agreed_at": timezone.now().isoformat(),
                "device_data": {
                    "ip_address": ip_address or "127.0.0.1",
                    "user_agent": user_agent or "unknown",
                },
                "service_agreement_type": "FULL",
            },
        },
        "primary_contact": {
            "email": email,
        },
    }


def _check_duplicates(email: str, company_name: str, phone_number) -> CommandResult:
    if Company.objects.filter(name__iexact=company_name).exists():
        return CommandResult.conflict(f"Company '{company_name}' already exists.")
    if phone_number and (
        Company.objects.filter(phone_number=phone_number).exists()
        or User.objects.filter(phone_number=phone_number).exists()
    ):
        return CommandResult.conflict(f"Phone number '{phone_number}' is already registered.")
    if User.objects.filter(email=email).exists():
        return CommandResult.conflict(f"User with email '{email}' already exists.")
    return None


def _mark(attempt: RegistrationAttempt, state: str, **fields) -> None:
    attempt.state = state
    for key, value in fields.items():
        setattr(attempt, key, value)
    attempt.save()


@transaction.atomic
def _create_local_records(role, data, phone_number, account_id):
    company = Company.objects.create(
        name=data["company_name"],
        phone_number=phone_number,
        airwallex_account_id=account_id,
        is_active=False,
        is_verified=False,
    )
    user = User.objects.create_user(
        email=data["email"],
        password=data["password"],
        first_name=data.get("first_name", ""),
        last_name=data.get("last_name", ""),
        phone_number=phone_number,
        role=role,
        company=company,
    )
    return company, user


def register_signup(data: dict, ip_address: str = "", user_agent: str = "") -> CommandResult:
    """
    Register a company and its first user.

    Args:
        data: validated RegisterSerializer data
        ip_address / user_agent: device data sent with the customer agreement

    Returns:
        CommandResult with {email, role_name, company_id, user_id}
    """
    email = data["email"]
    company_name = data["company_name"]
    phone_number = (data.get("phone_number") or "").strip() or None

    duplicate = _check_duplicates(email, company_name, phone_number)
    if duplicate:
        logger.info("Registration rejected", extra={"email": email, "reason": duplicate.error})
        return duplicate

    role = Role.objects.filter(name=CUSTOMER_ROLE, is_active=True).first()
    if role is None:
        logger.error("Registration misconfigured: customer role missing")
        return CommandResult.not_found("Customer role is not configured.")

    attempt = RegistrationAttempt.objects.create(
        email=email,
        company_name=company_name,
        phone_number=phone_number or "",
    )

    try:
        account = get_airwallex_client().create_account(
            build_account_request(company_name, email, ip_address, user_agent)
        )
    except AirwallexError as exc:
        _mark(attempt, RegistrationAttempt.State.FAILED, failure_reason=exc.message)
        logger.warning(
            "Airwallex account creation failed",
            extra={"attempt_id": attempt.pk, "status_code": exc.status_code},
        )
        return CommandResult.fail("Failed to create Airwallex account", ErrorKind.UPSTREAM)

    account_id = account.get("id")
    if not account_id:
        _mark(attempt, RegistrationAttempt.State.FAILED, failure_reason="Provider response had no account id")
        return CommandResult.fail("Failed to create Airwallex account", ErrorKind.UPSTREAM)

    _mark(attempt, RegistrationAttempt.State.ACCOUNT_CREATED, airwallex_account_id=account_id)

    try:
        company, user = _create_local_records(role, data, phone_number, account_id)
    except DatabaseError as exc:
        _mark(attempt, RegistrationAttempt.State.ORPHANED, failure_reason=str(exc))
        logger.error(
            "Registration left an orphaned Airwallex account",
            extra={"attempt_id": attempt.pk, "airwallex_account_id": account_id},
        )
        return CommandResult.fail("Failed to create company record", ErrorKind.CONFLICT)

    _mark(attempt, RegistrationAttempt.State.COMPLETED, company=company, user=user)
    logger.info(
        "Registration completed",
        extra={"attempt_id": attempt.pk, "company_id": company.pk, "user_id": user.pk},
    )
    return CommandResult.ok(
        {
            "email": user.email,
            "role_name": role.name,
            "company_id": company.pk,
            "user_id": user.pk,
        },
        message="Register Success",
    )


def orphaned_attempts():
    return RegistrationAttempt.objects.filter(state=RegistrationAttempt.State.ORPHANED)


@transaction.atomic
def close_orphaned_attempt(attempt_id, note: str = "") -> CommandResult:
    attempt = orphaned_attempts().filter(pk=attempt_id).first()
    if attempt is None:
        return CommandResult.not_found(f"Orphaned registration attempt {attempt_id} not found.")

    reason = attempt.failure_reason
    if note:
        reason = f"{reason}\nReconciled: {note}".strip()
    _mark(attempt, RegistrationAttempt.State.RECONCILED, failure_reason=reason)
    return CommandResult.ok(attempt)
