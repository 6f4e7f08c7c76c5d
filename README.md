# guardmw

Small, composable HTTP middleware and a path router for building a
configuration-management API. Handlers take a `(writer, request)` pair.
Middleware are plain functions that wrap one handler in another.

## What is included

- `guardmw.http`: `Request`, `Headers`, `ResponseWriter`, `new_request` and `chain`, which are the building blocks that every handler uses.
- `guardmw.request_id`: `request_id` middleware, which reuses or generates an `X-Request-ID`. `get_request_id` reads it back from the request context.
- `guardmw.security_headers`: `security_headers` sets the nosniff, frame, CSP, referrer and permissions headers, and sets HSTS over TLS.
- `guardmw.https`: `enforce_https(HTTPSConfig(enabled=True))` redirects plain HTTP requests with a 301.
- `guardmw.recovery`: `recovery` turns an unhandled exception into a JSON 500 that includes the request ID.
- `guardmw.access_log`: `access_log` logs when each request starts and when it completes. The completion record carries the status, size and duration. `StatusRecorder` captures the status and the number of bytes written.
- `guardmw.validation`: `request_size_limit`, `content_type_validation`, `method_validation` and `bad_request`.
- `guardmw.routing`: `Router` with `use`, `with_`, `get`/`post`/`put`/`delete`, `route`, `group`, and `url_param` for `{name}` segments.
- `guardmw.auth`: `auth(AuthConfig(jwt_secret=...))` checks Bearer tokens. `generate_token`, `generate_refresh_token` and `validate_refresh_token` handle HS256 JWTs. `get_user_id` and `get_user_email` read the caller's identity.
- `guardmw.authorization`: `require_role`, `require_admin`, `require_editor` and `require_viewer` ask a `PermissionChecker` about the caller's role in a project.
- `guardmw.cors`: `cors()` applies the default cross-origin policy. `cors_handler(CORSOptions(...))` takes your own options.
- `guardmw.metrics`: `metrics(HTTPMetrics(...))` counts requests by method, path and status. It also records durations and tracks requests in flight.
- `guardmw.rate_limit`: `RateLimiter(rps, burst)` holds a `TokenBucket` for each client address. The `rate_limit` middleware answers 429 when a bucket is empty.

## Example

```python
from datetime import timedelta

from guardmw.auth import AuthConfig, auth, generate_token, get_user_id
from guardmw.http import chain, new_request, ResponseWriter
from guardmw.request_id import request_id
from guardmw.routing import Router
from guardmw.security_headers import security_headers

secret = "secret"

def whoami(writer, request):
    writer.write(get_user_id(request.context).encode())

router = Router()
router.use(request_id, security_headers)
router.group(lambda r: (r.use(auth(AuthConfig(jwt_secret=secret))), r.get("/me", whoami)))

bearer = generate_token("user123", "user@example.com", secret, timedelta(hours=1))
request = new_request("GET", "/me", headers={"Authorization": f"Bearer {bearer}"})
writer = ResponseWriter()
router(writer, request)
print(writer.status, writer.body)
```

## Running the tests

```
pip install -e ".[test]"
pytest
```