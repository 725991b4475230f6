"""
Sample AuthSub flow: ask for an email, send the user to Google for approval,
then list that account's contacts.
"""

from collections.abc import Callable
from html import escape

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse

from gmail_contacts.config import settings
from gmail_contacts.infrastructure.observability.logging import get_logger
from gmail_contacts.services.authsub_service import build_authorization_url
from gmail_contacts.services.contacts_service import GmailContactsService
from gmail_contacts.services.errors import GmailContactsError

logger = get_logger(__name__)

router = APIRouter(tags=["authsub-sample"])

ServiceFactory = Callable[[str], GmailContactsService]


def get_service_factory() -> ServiceFactory:
    """Dependency returning a factory that builds a service for a request token."""
    return lambda token: GmailContactsService(token)


@router.get("/", response_class=HTMLResponse)
def email_form():
    """The initial page, a form with an email to fetch contacts for."""
    return f"""<form action="{settings.SAMPLE_APP_BASE_URL.rstrip('/')}/go">
<input name="email">
<input type="submit" value="go">
</form>
"""


@router.get("/go")
def start_authsub(email: str = Query(...)):
    """Redirect the user to Google for approval."""
    url = build_authorization_url(settings.sample_return_url(email))

    logger.info("Redirecting to AuthSub approval", email=email, url_length=len(url))

    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/return", response_class=HTMLResponse)
def list_contacts(
    token: str = Query(""),
    email: str = Query(...),
    service_factory: ServiceFactory = Depends(get_service_factory),
):
    """Google sends the user back here with a request token."""
    body = "<h1>contacts</h1>\n\n"

    service = service_factory(token)
    try:
        contacts = service.fetch_contacts(email)
    except GmailContactsError as e:
        logger.error(
            "Sample contacts fetch failed",
            email=email,
            error=str(e),
            error_type=type(e).__name__,
        )
        return body + f"<h1>error</h1>\n\n<p>{escape(str(e))}</p>\n"
    finally:
        service.close()

    items = "".join(
        f"<li>{escape(contact.title)} - {escape(contact.primary_email)}</li>\n"
        for contact in contacts.contacts
    )
    return body + f"<ul>\n{items}</ul>\n"
