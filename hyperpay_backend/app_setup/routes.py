"""
Routes simples (hors routers).
- /: chaîne de liveness en texte brut (mode HyperPay courant).
- /favicon.ico: pas de contenu (204) pour éviter des 404 dans les logs.
"""
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response
from starlette.status import HTTP_204_NO_CONTENT


def register_routes(app: FastAPI) -> None:
    @app.get("/", include_in_schema=False, response_class=PlainTextResponse)
    def liveness(request: Request):
        env = request.app.state.settings.hyperpay_env
        return f"HyperPay backend ({env}) running."

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon():
        return Response(status_code=HTTP_204_NO_CONTENT)
