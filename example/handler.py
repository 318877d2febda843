"""app: handle requests."""

from resourceful import Application, NotFound, Resource, StatusCode

app = Application(name="app", debug=True)


@app.register
class Blanket(Resource):
    """Blankets."""

    def list(self):
        return "all blankets"


@app.configuration
def mapping(app: Application) -> None:
    """Routes, filters and handlers, rebuilt on every request in debug mode."""

    @app.get("/", name="home")
    def home(resource) -> str:
        return "Yo"

    @app.get("/param/{value}", name="param")
    def param(resource, value: str) -> str:
        return f"You asked for: {value}."

    @app.url("http://localhost:{port}/port", match={"port": r"(\d+)"})
    def port(resource, port: str) -> str:
        return port

    app.add_action("/{resources}", name="list", resource=Blanket, methods="GET")

    @app.get("/onager")
    def onager(resource) -> None:
        resource.redirect(app.paths().generate("home"))

    @app.always()
    def stamp(request) -> None:
        request.response.headers["X-Served-By"] = app.name

    @app.handle(NotFound)
    def not_found(request, error) -> None:
        request.response.status_code = StatusCode.NOT_FOUND
        request.response.content_type = "text/plain"
        request.response.body = str(error)
