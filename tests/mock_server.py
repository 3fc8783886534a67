"""Mock e-ticket server.

This module defines the ticket data used across the tests. Tickets are
keyed by numeric ID; IDs not listed return 404, like the real service.

The data is laid out so that one contiguous range covers every outcome a
worker has to handle: a day 1 ticket, a missing ID, a page with no day
marker, a day 2 ticket, a page naming both days, and a server error.
"""

from dataclasses import dataclass

from aiohttp import web


@dataclass
class MockTicket:
    """A ticket page served by the mock server."""

    ticket_id: int
    holder: str
    day_label: str | None


TICKETS: dict[int, MockTicket] = {
    1000: MockTicket(ticket_id=1000, holder="Rina", day_label="Day 1"),
    # 1001 is missing
    1002: MockTicket(ticket_id=1002, holder="Budi", day_label=None),
    1003: MockTicket(ticket_id=1003, holder="Sari", day_label="Day 2"),
    1004: MockTicket(
        ticket_id=1004, holder="Tono", day_label="Day 1 + Day 2"
    ),
}

SERVER_ERROR_IDS: set[int] = {1005}

# Size of the /big/{id} payload; large enough to span many stream chunks.
BIG_BODY_SIZE = 1024 * 1024 + 17


def generate_ticket_html(ticket: MockTicket) -> str:
    """Render the HTML page for a ticket."""
    day = (
        f'<p class="day">{ticket.day_label}</p>'
        if ticket.day_label
        else '<p class="day">TBA</p>'
    )
    return f"""<!DOCTYPE html>
<html>
<head><title>E-Ticket {ticket.ticket_id}</title></head>
<body>
<h1>E-Ticket #{ticket.ticket_id}</h1>
<p class="holder">{ticket.holder}</p>
{day}
</body>
</html>"""


def _parse_id(request: web.Request) -> int:
    try:
        return int(request.match_info["id"])
    except ValueError as e:
        raise web.HTTPBadRequest(text="ID must be an integer") from e


async def handle_ticket(request: web.Request) -> web.Response:
    """Serve a ticket page, 404 for unknown IDs, 500 for broken ones."""
    ticket_id = _parse_id(request)

    if ticket_id in SERVER_ERROR_IDS:
        return web.Response(
            text="<h1>500 Internal Server Error</h1>",
            status=500,
            content_type="text/html",
        )

    ticket = TICKETS.get(ticket_id)
    if ticket is None:
        return web.Response(
            text="<h1>404 Not Found</h1>",
            status=404,
            content_type="text/html",
        )

    return web.Response(
        text=generate_ticket_html(ticket), content_type="text/html"
    )


async def handle_redirect(request: web.Request) -> web.Response:
    """Redirect to the canonical ticket URL."""
    ticket_id = _parse_id(request)
    raise web.HTTPFound(f"/e/{ticket_id}")


async def handle_big(request: web.Request) -> web.Response:
    """Serve a large day 1 page."""
    _parse_id(request)
    body = b"Day 1 " + b"x" * (BIG_BODY_SIZE - 6)
    return web.Response(body=body, content_type="text/html")


def create_app() -> web.Application:
    """Create the aiohttp application serving the mock ticket pages."""
    app = web.Application()
    app.router.add_get("/e/{id}", handle_ticket)
    app.router.add_get("/go/{id}", handle_redirect)
    app.router.add_get("/big/{id}", handle_big)
    return app
