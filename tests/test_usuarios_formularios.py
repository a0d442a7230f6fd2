"""
Tests de usuarios del bot (edición y cambios masivos) y formularios
"""
import pytest

from models_formularios import Formulario
from models_usuarios import UsuarioSistema


@pytest.fixture
def soporte(cliente_como):
    return cliente_como(telefono="555", modulos=["usuarios", "formularios"])


@pytest.fixture
def usuarios(insertar):
    return insertar(
        UsuarioSistema(telefonocaso="555", nombre="Ana", telefono="600001", asignacion="desactivar"),
        UsuarioSistema(telefonocaso="555", nombre="Beto", telefono="600002"),
        UsuarioSistema(telefonocaso="777", nombre="Caro", telefono="600003"),
    )


class TestUsuarios:
    def test_lista_reciente_primero(self, soporte, usuarios):
        rows = soporte.get("/api/usuarios").get_json()
        assert [u["nombre"] for u in rows] == ["Beto", "Ana"]

    def test_update_coalesce_y_contrasena_oculta(self, soporte, usuarios):
        r = soporte.put(f"/api/usuarios/{usuarios[0]}", json={"proceso": "kyc", "contrasena": "1234"})
        assert r.status_code == 200
        u = r.get_json()["usuario"]
        assert u["proceso"] == "kyc"
        assert u["nombre"] == "Ana"
        assert u["tiene_contrasena"] is True
        assert "contrasena" not in u

    def test_update_aprobar_invalido(self, soporte, usuarios):
        r = soporte.put(f"/api/usuarios/{usuarios[0]}", json={"aprobar": "quizas"})
        assert r.status_code == 400

    def test_update_ajeno(self, soporte, usuarios):
        assert soporte.put(f"/api/usuarios/{usuarios[2]}", json={"nombre": "x"}).status_code == 404

    def test_masivo_solo_visibles(self, soporte, admin, usuarios):
        r = soporte.put("/api/usuarios", json={"ids": usuarios, "campo": "aprobar", "valor": True})
        assert r.status_code == 200
        assert r.get_json()["actualizados"] == 2
        ajeno = admin.get(f"/api/usuarios/{usuarios[2]}").get_json()
        assert ajeno["aprobar"] is False

    def test_masivo_asignacion(self, soporte, usuarios):
        soporte.put("/api/usuarios", json={"ids": usuarios[:2], "campo": "asignacion", "valor": "activar"})
        rows = soporte.get("/api/usuarios").get_json()
        assert {u["asignacion"] for u in rows} == {"activar"}

    def test_masivo_validaciones(self, soporte, usuarios):
        assert soporte.put("/api/usuarios", json={"ids": [], "campo": "aprobar", "valor": True}).status_code == 400
        r = soporte.put("/api/usuarios", json={"ids": usuarios, "campo": "nombre", "valor": "x"})
        assert r.status_code == 400
        assert r.get_json()["error"] == "Campo invalido. Debe ser 'aprobar' o 'asignacion'"


class TestFormularios:
    @pytest.fixture
    def formularios(self, insertar):
        return insertar(
            Formulario(telefonocaso="555", telefono="600001", nombre="Ana", club="Leones",
                       tiposolicitud="deposito", cantidadfondos=100),
            Formulario(telefonocaso="555", telefono="600002", nombre="Beto", tiposolicitud="retiro"),
            Formulario(telefonocaso="777", telefono="600003", nombre="Ana", tiposolicitud="deposito"),
        )

    def test_busqueda_y_tipo(self, soporte, formularios):
        rows = soporte.get("/api/formularios?busqueda=leo").get_json()
        assert [f["nombre"] for f in rows] == ["Ana"]
        rows = soporte.get("/api/formularios?tiposolicitud=retiro").get_json()
        assert [f["nombre"] for f in rows] == ["Beto"]
        assert len(soporte.get("/api/formularios").get_json()) == 2

    def test_crear(self, soporte):
        r = soporte.post("/api/formularios", json={"telefono": "600009", "tiposolicitud": "deposito",
                                                   "cantidadfondos": "25.5",
                                                   "datosconversion": {"tasa": 36.5}})
        assert r.status_code == 201
        body = r.get_json()
        assert body["telefonocaso"] == "555"
        assert body["cantidadfondos"] == 25.5
        assert body["datosconversion"] == {"tasa": 36.5}

    def test_crear_sin_telefono(self, soporte):
        assert soporte.post("/api/formularios", json={"nombre": "x"}).status_code == 400

    def test_borrar(self, soporte, formularios):
        assert soporte.delete(f"/api/formularios/{formularios[2]}").status_code == 404
        assert soporte.delete(f"/api/formularios/{formularios[0]}").status_code == 200
        assert soporte.get(f"/api/formularios/{formularios[0]}").status_code == 404
