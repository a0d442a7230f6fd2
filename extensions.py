# extensions.py: punto único de extensiones compartidas
# Una sola instancia de SQLAlchemy para modelos, rutas y tests.
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

__all__ = ["db"]
