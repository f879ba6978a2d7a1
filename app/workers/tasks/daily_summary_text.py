from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from app.commitments.messages import format_money
from app.commitments.types import to_money

MEMBER_SUBJECT = "Your Daily Commitment Summary"
DISTRIBUTOR_SUBJECT = "Daily Commitment Summary Report"
ADMIN_SUBJECT = "Daily Platform Commitment Summary"


def _commitment_lines(snapshots: Sequence[dict[str, Any]], *, member_name: str | None = None) -> list[str]:
    lines: list[str] = []
    for snapshot in snapshots:
        head = f"- {snapshot.get('dealName', 'Deal')}"
        if member_name is not None:
            head += f" ({member_name})"
        head += f": {snapshot.get('quantity', 0)} units, {format_money(to_money(snapshot.get('totalPrice', 0)))}"
        lines.append(head)
        for detail in snapshot.get("sizeDetails", []):
            lines.append(
                f"    {detail['size']}: {detail['quantity']} x {format_money(to_money(detail['pricePerUnit']))}"
            )
    return lines


def build_member_summary(
    *,
    member_name: str,
    snapshots: Sequence[dict[str, Any]],
    total_quantity: int,
    total_amount: Decimal,
) -> str:
    lines = [
        f"Hello {member_name},",
        "",
        "Here is a summary of the commitments you made today:",
        *_commitment_lines(snapshots),
        "",
        f"Total quantity: {total_quantity} units",
        f"Total amount: {format_money(total_amount)}",
    ]
    return "\n".join(lines)


def build_distributor_summary(
    *,
    distributor_name: str,
    member_name: str,
    snapshots: Sequence[dict[str, Any]],
    total_quantity: int,
    total_amount: Decimal,
) -> str:
    lines = [
        f"Hello {distributor_name},",
        "",
        "Members committed to your deals today:",
        *_commitment_lines(snapshots, member_name=member_name),
        "",
        f"Total quantity: {total_quantity} units",
        f"Total amount: {format_money(total_amount)}",
    ]
    return "\n".join(lines)


def build_admin_summary(rows: Sequence[dict[str, Any]]) -> str:
    lines = ["Daily platform commitment summary by distributor:", ""]
    for row in rows:
        lines.append(
            f"- {row['distributor_name']}: {row['total_commitments']} commitments, "
            f"{row['total_quantity']} units, {format_money(row['total_amount'])}, "
            f"{row['unique_members']} members"
        )
    return "\n".join(lines)
