"""
Small helpers shared by the JSON views.
"""
from __future__ import annotations

import json
import logging
from functools import wraps

from django.core.exceptions import PermissionDenied, ValidationError
from django.core.paginator import EmptyPage, PageNotAnInteger, Paginator
from django.http import JsonResponse, QueryDict

from .exceptions import NotFound, ReconciliationFailure

logger = logging.getLogger(__name__)


def json_error(status: int, message: str, errors: dict | None = None) -> JsonResponse:
    payload = {"error": message}
    if errors:
        payload["errors"] = errors
    return JsonResponse(payload, status=status)


def parse_body(request) -> dict:
    """JSON bodies for API clients, regular form posts otherwise."""
    if request.content_type == "application/json":
        try:
            data = json.loads(request.body or b"{}")
        except ValueError:
            raise ValidationError("Request body is not valid JSON.")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object.")
        return data
    if request.method == "POST":
        return request.POST.dict()
    # Django only parses form bodies for POST
    return QueryDict(request.body, encoding=request.encoding).dict()


def api_errors(view_func):
    """Translate domain errors raised by services into JSON responses."""
    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except ValidationError as e:
            errors = e.message_dict if hasattr(e, "error_dict") else {"__all__": e.messages}
            return json_error(400, "Validation failed.", errors)
        except NotFound as e:
            return json_error(404, str(e))
        except PermissionDenied as e:
            return json_error(403, str(e) or "Permission denied.")
        except ReconciliationFailure as e:
            return json_error(500, str(e))

    return _wrapped


def paginate(request, qs, default_limit: int = 25, max_limit: int = 200):
    try:
        limit = int(request.GET.get("limit") or default_limit)
    except ValueError:
        limit = default_limit
    limit = max(1, min(limit, max_limit))

    paginator = Paginator(qs, limit)
    try:
        page = paginator.page(request.GET.get("page") or 1)
    except PageNotAnInteger:
        page = paginator.page(1)
    except EmptyPage:
        page = paginator.page(paginator.num_pages)

    meta = {
        "page": page.number,
        "limit": limit,
        "total": paginator.count,
        "total_pages": paginator.num_pages,
    }
    return page.object_list, meta
