import os

# La configuración se lee al importar app.core.config
os.environ["ENVIRONMENT"] = "testing"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas-con-mas-de-32-caracteres")
