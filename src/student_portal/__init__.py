"""Student Portal accounts service.

This package is organized by feature modules (accounts, mail, database, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
