"""Utility functions for masking personal data in logs."""


def mask_email(email: str) -> str:
    """
    Mask email address for logging purposes.

    Example: user@example.com -> u***@e***.com

    Args:
        email: Email address to mask

    Returns:
        Masked email address
    """
    if not email or "@" not in email:
        return "***"

    parts = email.split("@")
    if len(parts) != 2:
        return "***"

    local, domain = parts

    # Mask local part: keep first character
    masked_local = local[0] + "***" if local else "***"

    # Mask domain: keep first character before dot
    domain_parts = domain.split(".")
    if len(domain_parts) >= 2 and domain_parts[0]:
        masked_domain = domain_parts[0][0] + "***." + ".".join(domain_parts[1:])
    else:
        masked_domain = "***"

    return f"{masked_local}@{masked_domain}"


def mask_phone(phone: str) -> str:
    """
    Mask phone number for logging purposes, keeping the last 4 digits.

    Example: (555) 123-4567 -> ***4567

    Args:
        phone: Phone number to mask

    Returns:
        Masked phone number
    """
    digits = "".join(ch for ch in phone or "" if ch.isdigit())
    if len(digits) < 4:
        return "***"
    return "***" + digits[-4:]


def mask_token(token: str, visible: int = 4) -> str:
    """
    Mask an opaque session token, keeping a short prefix for correlation.

    Args:
        token: Token value
        visible: Number of leading characters to keep

    Returns:
        Masked token
    """
    if not token:
        return "<none>"
    if len(token) <= visible:
        return "***"
    return token[:visible] + "***"
