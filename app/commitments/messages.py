from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from app.commitments.types import OverrideLine, SizeLine, to_money


def format_money(value: Decimal) -> str:
    return f"${to_money(value):.2f}"


def describe_lines(lines: Sequence[SizeLine] | Sequence[OverrideLine], *, with_tier: bool = False) -> str:
    parts: list[str] = []
    for line in lines:
        text = f"{line.size}: {line.quantity} units at {format_money(line.price_per_unit)} each"
        tier = getattr(line, "applied_discount_tier", None)
        if with_tier and tier is not None:
            text += f" (with tier discount at {tier.tier_quantity}+ units)"
        parts.append(text)
    return ", ".join(parts)


def commitment_log_message(
    *,
    deal_name: str,
    member_name: str,
    member_email: str,
    total_quantity: int,
    total_price: Decimal,
    impersonator_name: str | None = None,
    impersonator_email: str | None = None,
) -> str:
    totals = f"Total: {total_quantity} units, {format_money(total_price)}"
    if impersonator_name is not None:
        return (
            f"Admin {impersonator_name} ({impersonator_email}) made commitment to deal \"{deal_name}\" "
            f"on behalf of member {member_name} ({member_email}) - {totals}"
        )
    return f"Member {member_name} ({member_email}) committed to deal \"{deal_name}\" - {totals}"


def modify_log_message(
    *,
    deal_name: str,
    member_name: str,
    member_email: str,
    details: str,
    total_price: Decimal,
    impersonator_name: str | None = None,
) -> str:
    prefix = f"Member {member_name} ({member_email})"
    if impersonator_name is not None:
        prefix = f"Admin {impersonator_name} on behalf of member {member_name} ({member_email})"
    return (
        f"{prefix} modified commitment to deal \"{deal_name}\" - "
        f"{details}, Total: {format_money(total_price)}"
    )


def cancel_log_message(*, deal_name: str, member_name: str, impersonator_name: str | None = None) -> str:
    if impersonator_name is not None:
        return (
            f"Admin {impersonator_name} cancelled commitment to deal \"{deal_name}\" "
            f"on behalf of member {member_name}"
        )
    return f"Member {member_name} cancelled commitment to deal \"{deal_name}\""


def failed_commitment_log_message(*, member_name: str, deal_name: str, error: str) -> str:
    return f"Failed commitment by {member_name} to \"{deal_name}\" - Error: {error}"


def failed_commitment_action_log_message(*, action: str, actor_name: str, deal_name: str, error: str) -> str:
    return f"Failed {action} by {actor_name} on \"{deal_name}\" - Error: {error}"


def commitment_created_for_distributor(
    *,
    member_name: str,
    deal_name: str,
    total_quantity: int,
    total_price: Decimal,
    details: str,
) -> str:
    return (
        f"{member_name} has committed to your deal \"{deal_name}\" - Total: {total_quantity} units, "
        f"{format_money(total_price)}. Size details: {details}"
    )


def commitment_created_for_admins(
    *,
    member_name: str,
    deal_name: str,
    distributor_name: str,
    total_quantity: int,
) -> str:
    return (
        f"{member_name} has committed to deal \"{deal_name}\" by distributor {distributor_name} - "
        f"Total: {total_quantity} units"
    )


def owner_tier_change(deal_name: str, *, activated: bool, deactivated: bool) -> tuple[str, str]:
    if activated and deactivated:
        return (
            "Volume Discount Tiers Updated",
            f"Deal \"{deal_name}\" has had discount tier changes. Some sizes reached new tiers, "
            "others dropped below tier thresholds.",
        )
    if activated:
        return (
            "Volume Discount Tier Reached",
            f"A volume discount tier has been reached for deal \"{deal_name}\" - "
            "Your commitment has been automatically updated with better pricing!",
        )
    return (
        "Volume Discount Tier Lost",
        f"The collective quantity for deal \"{deal_name}\" has dropped below a discount tier "
        "threshold - Your price has been adjusted accordingly.",
    )


def _activated_details(activated: Sequence[tuple[str, int, Decimal]]) -> str:
    return ", ".join(
        f"{size} reached {tier_quantity}+ units (price: {format_money(price)})"
        for size, tier_quantity, price in activated
    )


def _deactivated_details(deactivated: Sequence[tuple[str, int]]) -> str:
    return ", ".join(
        f"{size} dropped below tier threshold (now: {pool} units)" for size, pool in deactivated
    )


def deal_tier_change(
    deal_name: str,
    *,
    activated: Sequence[tuple[str, int, Decimal]],
    deactivated: Sequence[tuple[str, int]],
) -> tuple[str, str]:
    """Title/message summarizing tier activations and losses for a deal."""
    if activated and deactivated:
        return (
            "Volume Discount Tiers Changed",
            f"Your deal \"{deal_name}\" has tier changes. Activated: {_activated_details(activated)}. "
            f"Deactivated: {_deactivated_details(deactivated)}",
        )
    if activated:
        return (
            "Volume Discount Tier Reached",
            f"Your deal \"{deal_name}\" has reached volume discount tiers for: "
            f"{_activated_details(activated)}",
        )
    return (
        "Volume Discount Tier Lost",
        f"Your deal \"{deal_name}\" has lost volume discount tiers for: "
        f"{_deactivated_details(deactivated)}",
    )


def admin_tier_change(
    deal_name: str,
    *,
    activated: Sequence[tuple[str, int, Decimal]],
    deactivated: Sequence[tuple[str, int]],
) -> tuple[str, str]:
    parts: list[str] = []
    if activated:
        parts.append(f"Activated: {_activated_details(activated)}")
    if deactivated:
        parts.append(f"Deactivated: {_deactivated_details(deactivated)}")
    return "Volume Discount Tiers Changed", f"Deal \"{deal_name}\" tier changes. " + ". ".join(parts)


def status_log_message(
    *,
    deal_name: str,
    member_name: str,
    old_status: str,
    new_status: str,
    original_details: str,
    total_price: Decimal,
    modified_details: str | None,
    modified_total_price: Decimal | None,
) -> str:
    head = f"Commitment for \"{deal_name}\" by {member_name} changed from {old_status} to {new_status}"
    if modified_details is not None and modified_total_price is not None:
        return (
            f"{head} with modifications - Original: {original_details}, Modified: {modified_details}, "
            f"Total: {format_money(modified_total_price)}"
        )
    return f"{head} - Details: {original_details}, Total: {format_money(total_price)}"


def status_member_message(
    *,
    deal_name: str,
    status: str,
    distributor_response: str,
    modified_details: str | None,
) -> str:
    message = f"Your commitment for \"{deal_name}\" has been {status}"
    if distributor_response:
        message += f" - Message: {distributor_response}"
    if modified_details:
        message += f" - Modified sizes: {modified_details}"
    return message


def status_admin_message(*, deal_name: str, member_name: str, status: str) -> str:
    return f"Commitment for deal \"{deal_name}\" by {member_name} has been {status} by distributor"


def status_email(
    *,
    deal_name: str,
    status: str,
    original_details: str,
    total_price: Decimal,
    modified_details: str | None,
    modified_total_price: Decimal | None,
    distributor_response: str,
) -> tuple[str, str]:
    subject = f"Commitment Status Update - {status.upper()}"
    body = f"Your commitment for deal \"{deal_name}\" has been {status}"
    if modified_details is not None and modified_total_price is not None:
        body += f"\n\nOriginal Commitment:\n{original_details}\nTotal: {format_money(total_price)}"
        body += f"\n\nModified Details:\n{modified_details}\nTotal: {format_money(modified_total_price)}"
    else:
        body += f"\n\nDetails:\n{original_details}\nTotal: {format_money(total_price)}"
    if distributor_response:
        body += f"\n\nDistributor Message: {distributor_response}"
    return subject, body


def status_sms(*, deal_name: str, status: str, details: str) -> str:
    return f"Your commitment for \"{deal_name}\" has been {status}. {details}"
