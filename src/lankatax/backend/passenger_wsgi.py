"""WSGI entrypoint for deploying the LankaTax backend behind Passenger."""

from lankatax.backend.app import create_app

# Passenger expects a module-level variable named ``application``.
application = create_app()
