from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="/test-fixtures", tags=["test-fixtures"])

ACCESSIBLE_HTML = """
<!DOCTYPE html>
<html lang="en">
  <head>
    <title>Test Page - Accessible</title>
  </head>
  <body>
    <h1>Test Page</h1>
    <img src="test1.jpg" alt="Test image 1" />
    <img src="test2.jpg" alt="Test image 2" />

    <form>
      <label for="username">Username:</label>
      <input type="text" id="username" />

      <label for="email">Email:</label>
      <input type="email" id="email" />
    </form>
  </body>
</html>
""".strip()

NOT_ACCESSIBLE_HTML = """
<!DOCTYPE html>
<html lang="en">
  <head></head>
  <body>
    <h1>Test Page - Not Accessible</h1>
    <img src="test1.jpg" />
    <img src="test2.jpg" alt="" />

    <form>
      <input type="text" />
      <input type="email" id="email" />
    </form>
  </body>
</html>
""".strip()


@router.get("/accessible.html", response_class=HTMLResponse)
async def accessible_page():
    return HTMLResponse(ACCESSIBLE_HTML)


@router.get("/not-accessible.html", response_class=HTMLResponse)
async def not_accessible_page():
    return HTMLResponse(NOT_ACCESSIBLE_HTML)
