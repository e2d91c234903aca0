"""Inspector: a small app with the inspection pages mounted.

Demonstrates a SQLite database connected on startup, an app-level
middleware, and the gated pages at /_stackpeek and /_stackpeek/stack.
The pages are visible because the app runs with env="local". With any
other env and debug off they answer a bare 404.

Run:
    python app.py
"""

from stackpeek import App, AppConfig, InspectorConfig, Request, mount_inspector

app = App(
    AppConfig(name="inspector-demo", env="local", database_url="sqlite:///:memory:"),
)


async def tag_response(request: Request, next):
    response = await next(request)
    return response.with_header("X-Handled-By", "inspector-demo")


app.add_middleware(tag_response)


@app.on_startup
async def seed():
    await app.db.execute("CREATE TABLE IF NOT EXISTS notes (id INTEGER PRIMARY KEY, body TEXT)")
    await app.db.execute("INSERT INTO notes (body) VALUES (?)", "hello")


@app.route("/")
def index():
    return "Open /_stackpeek to inspect this process."


@app.route("/notes")
async def notes():
    count = await app.db.fetch_val("SELECT COUNT(*) FROM notes")
    return {"notes": count}


mount_inspector(app, InspectorConfig(title="Inspector demo"))


if __name__ == "__main__":
    app.run()
