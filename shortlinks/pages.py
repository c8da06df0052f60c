from html import escape
from fastapi.responses import HTMLResponse

_PAGES = {
    404: ("Link Not Found", "This short link does not exist or has been removed."),
    410: ("Link Expired", "This link is no longer active."),
    500: ("Something Went Wrong", "The link could not be opened right now. Please try again later."),
}

# Unlisted statuses reuse the generic wording but keep their own code

_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{title}</title><meta charset="UTF-8"></head>
<body style="font-family:Arial;text-align:center;padding:50px;">
  <div style="font-size:72px;">{status}</div>
  <h1>{title}</h1>
  <p>{message}</p>
  <a href="/">Home</a>
</body>
</html>
"""

def error_page(status_code: int) -> HTMLResponse:
    title, message = _PAGES.get(status_code, _PAGES[500])
    content = _TEMPLATE.format(status=status_code, title=escape(title), message=escape(message))
    return HTMLResponse(content=content, status_code=status_code)
