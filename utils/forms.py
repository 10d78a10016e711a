import re
from fastapi import Request, status
from starlette.datastructures import UploadFile
from core.exceptions import AppException

_KEY_PARTS = re.compile(r"[^.\[\]]+")

def _assign(target: dict, parts: list[str], value):
    for part in parts[:-1]:
        nested = target.get(part)
        if not isinstance(nested, dict):
            nested = {}
            target[part] = nested
        target = nested
    target[parts[-1]] = value

def form_to_payload(form) -> tuple[dict, dict[str, list[UploadFile]]]:
    """
    Split multipart form data into a nested field dict and the attached files.

    "address.city" and "address[city]" both land in payload["address"]["city"];
    "images[]" is treated as "images". Repeated fields become lists.
    """
    payload: dict = {}
    files: dict[str, list[UploadFile]] = {}
    for key in form.keys():
        parts = _KEY_PARTS.findall(key)
        if not parts:
            continue
        values = form.getlist(key)
        uploads = [v for v in values if isinstance(v, UploadFile)]
        if uploads:
            files.setdefault(".".join(parts), []).extend(u for u in uploads if u.filename)
            continue
        _assign(payload, parts, values[0] if len(values) == 1 else list(values))
    return payload, files

async def read_request_payload(request: Request) -> tuple[dict, dict[str, list[UploadFile]]]:
    """JSON bodies and multipart/urlencoded forms end up in the same shape."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise AppException(status.HTTP_400_BAD_REQUEST, "Request body is not valid JSON.", code="INVALID_BODY")
        return (body if isinstance(body, dict) else {}), {}
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        return form_to_payload(form)
    return {}, {}
