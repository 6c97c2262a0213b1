"""Ticket Message Formatting — pure builders for the Discord payloads this service posts.

Invariants:
    - All functions are pure (no IO, no async); timestamps are passed in
    - Prices are rendered in Indonesian Rupiah style: "Rp 50.000" ('.' thousands separator)
    - The summary mentions exactly the counterparty; the close warning mentions nobody
    - Accent colour is gold for the store owner, green for every other seller

Design Decisions:
    - Colour is presentation only; access is decided by overwrites, never by colour
    - allowed_mentions is set explicitly so buyer/actor names like "@everyone"
      can never ping the guild
    - Storefront copy stays in Indonesian: buyers and sellers are Indonesian-speaking
"""

from datetime import datetime

from zstore.core.domain_types import TransactionTicket

OWNER_COLOR = 0xFFD700
SELLER_COLOR = 0x2ECC71

VERIFIED_BADGE = "Verified by ZStore System"


def format_rupiah(amount: int) -> str:
    """50000 -> 'Rp 50.000'."""
    return f"Rp {amount:,}".replace(",", ".")


def pick_accent_color(counterparty_id: str, owner_id: str | None) -> int:
    if owner_id and counterparty_id == owner_id:
        return OWNER_COLOR
    return SELLER_COLOR


def build_ticket_embed(
    ticket: TransactionTicket, *, owner_id: str | None, timestamp: datetime,
) -> dict:
    """Structured summary shown at the top of every new ticket channel."""
    return {
        "title": "🛒 TRANSAKSI BARU DIMULAI",
        "description": (
            f"Halo **{ticket.buyer_name}**, selamat datang di channel "
            "transaksi privat ZStore."
        ),
        "color": pick_accent_color(ticket.counterparty_id, owner_id),
        "fields": [
            {"name": "📦 Produk", "value": ticket.product_name, "inline": True},
            {"name": "💰 Total Harga", "value": format_rupiah(ticket.price), "inline": True},
            {"name": "🌐 Jalur Beli", "value": ticket.method, "inline": True},
            {"name": "🛡️ Status", "value": VERIFIED_BADGE, "inline": False},
        ],
        "footer": {
            "text": "Gunakan channel ini untuk diskusi dan pengiriman aset jasa.",
        },
        "timestamp": timestamp.isoformat(),
    }


def build_ticket_message(
    ticket: TransactionTicket, *, owner_id: str | None, timestamp: datetime,
) -> dict:
    """Full message payload: counterparty ping + summary embed."""
    return {
        "content": (
            f"<@{ticket.counterparty_id}> Anda memiliki pesanan baru! "
            "Silahkan layani pembeli ini."
        ),
        "embeds": [
            build_ticket_embed(ticket, owner_id=owner_id, timestamp=timestamp),
        ],
        "allowed_mentions": {"parse": [], "users": [ticket.counterparty_id]},
    }


def build_close_warning(actor_name: str, delay_seconds: float) -> dict:
    """Warning posted when a ticket enters CLOSING."""
    return {
        "content": (
            f"⚠️ Channel ini akan ditutup dalam {delay_seconds:g} detik "
            f"oleh {actor_name}..."
        ),
        "allowed_mentions": {"parse": []},
    }
