from fastapi.openapi.utils import get_openapi


def custom_openapi(app):
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=(
            "API d'upload vidéo : ffprobe + ffmpeg (fast-start) puis publication S3/CloudFront.\n\n"
            "### Conventions\n"
            "- Toutes les heures sont en UTC.\n"
            "- Authentification : `Authorization: Bearer <access_token>`.\n"
            "- Erreurs : `{\"detail\": \"...\"}` ; la sortie brute des outils n'est jamais exposée.\n"
        ),
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema
