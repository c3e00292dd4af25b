from flask import Flask

from . import auth, categories, collections, igdb, launcher, library, media, recommended, settings

BLUEPRINTS = (
    auth.bp,
    library.bp,
    recommended.bp,
    categories.bp,
    collections.bp,
    media.bp,
    launcher.bp,
    settings.bp,
    igdb.bp,
)


def register_blueprints(app: Flask) -> None:
    for bp in BLUEPRINTS:
        app.register_blueprint(bp)
