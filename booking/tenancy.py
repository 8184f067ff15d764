# booking/tenancy.py
#
# Purpose:
# - Resolve the salon (Tenant) a request is for and the anonymous booking
#   session key used to own holds.
#
# Notes:
# - Tenant comes from the X-Tenant header, or ?tenant= as a fallback.
# - The booking session key is generated server-side and kept in the Django
#   session; a client cannot pick someone else's key to steal their hold.
#
import uuid

from django.http import Http404

from .models import Tenant

SESSION_KEY = "booking_session_id"


def get_request_tenant(request) -> Tenant:
    slug = (request.headers.get("X-Tenant") or request.GET.get("tenant") or "").strip()
    if not slug:
        raise Http404("Unknown salon.")
    tenant = Tenant.objects.filter(slug=slug).first()
    if tenant is None:
        raise Http404("Unknown salon.")
    return tenant


def get_booking_session_id(request) -> str:
    session_id = request.session.get(SESSION_KEY)
    if not session_id:
        session_id = f"session_{uuid.uuid4().hex}"
        request.session[SESSION_KEY] = session_id
    return session_id
