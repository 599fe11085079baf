from fastapi import APIRouter
from fastapi.responses import RedirectResponse


class HomeRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/", self.index, methods=["GET"], include_in_schema=False)

    def index(self):
        return RedirectResponse(url="/products")
