"""
Tests de conversaciones: listado por telefonoempresa, envío de respuesta y media inline
"""
import base64
from unittest.mock import Mock, patch

import pytest
import requests

from extensions import db
from models_chatbot import Conversacion
from models_usuarios import UsuarioSistema

PNG = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def operador(cliente_como):
    return cliente_como(telefono="555", modulos=["conversaciones"])


@pytest.fixture
def conversaciones(insertar):
    insertar(UsuarioSistema(telefonocaso="555", nombre="Luis", telefono="600111"))
    return insertar(
        Conversacion(guid="g-1", telefonoempresa="555", telefonocliente="600111",
                     pregunta="¿saldo?", enlace="https://n8n.test/g1",
                     imagen="data:image/png;base64," + base64.b64encode(PNG).decode()),
        Conversacion(guid="g-2", telefonoempresa="555", telefonocliente="600222",
                     pregunta="hola", estado="completado", video="no-es-un-data-url"),
        Conversacion(guid="g-3", telefonoempresa="777", telefonocliente="600333", pregunta="x"),
    )


class TestListado:
    def test_solo_su_empresa(self, operador, conversaciones):
        rows = operador.get("/api/conversaciones").get_json()
        assert {r["guid"] for r in rows} == {"g-1", "g-2"}

    def test_nombreusuario(self, operador, conversaciones):
        rows = {r["guid"]: r for r in operador.get("/api/conversaciones").get_json()}
        assert rows["g-1"]["nombreusuario"] == "Luis"
        assert rows["g-2"]["nombreusuario"] is None
        assert rows["g-1"]["tiene_imagen"] is True

    def test_nombreusuario_no_cruza_tenant(self, operador, insertar):
        insertar(
            UsuarioSistema(telefonocaso="777", nombre="Operador de 777", telefono="300"),
            Conversacion(guid="g-9", telefonoempresa="555", telefonocliente="300", pregunta="x"),
        )
        rows = {r["guid"]: r for r in operador.get("/api/conversaciones").get_json()}
        assert rows["g-9"]["nombreusuario"] is None
        assert operador.get("/api/conversacion/g-9").get_json()["nombreusuario"] is None

    def test_filtro_estado(self, operador, conversaciones):
        rows = operador.get("/api/conversaciones?estado=pendiente").get_json()
        assert [r["guid"] for r in rows] == ["g-1"]

    def test_filtros_paso_accion_bloqueado(self, operador, insertar):
        insertar(
            Conversacion(guid="p-1", telefonoempresa="555", paso="pago", accionadmin="aprobar", bloqueado=True),
            Conversacion(guid="p-2", telefonoempresa="555", paso="pago", accionadmin="rechazar"),
            Conversacion(guid="p-3", telefonoempresa="555", paso="saludo"),
        )
        guids = lambda qs: {r["guid"] for r in operador.get("/api/conversaciones?" + qs).get_json()}
        assert guids("paso=pago") == {"p-1", "p-2"}
        assert guids("accion=rechazar") == {"p-2"}
        assert guids("bloqueado=true") == {"p-1"}
        assert guids("bloqueado=false") == {"p-2", "p-3"}
        assert operador.get("/api/conversaciones?bloqueado=quizas").status_code == 400

    def test_detalle_ajeno_404(self, operador, conversaciones):
        assert operador.get("/api/conversacion/g-3").status_code == 404
        assert operador.get("/api/conversacion/g-1").get_json()["pregunta"] == "¿saldo?"

    def test_sin_modulo(self, cliente_como, conversaciones):
        c = cliente_como(telefono="555", modulos=["preguntas"])
        assert c.get("/api/conversaciones").status_code == 403


class TestEnviarRespuesta:
    BODY = {"guid": "g-1", "enlace": "https://otro.test/hook", "respuesta": "Su saldo es 10"}

    def test_envia_y_completa(self, operador, conversaciones):
        with patch("webhooks.requests.post") as post:
            post.return_value = Mock(status_code=200, text="ok")
            r = operador.post("/api/enviar-respuesta", json={**self.BODY, "accion": "aprobar"})
        assert r.status_code == 200
        # se usa el enlace guardado en la conversación
        assert post.call_args.args[0] == "https://n8n.test/g1"
        assert post.call_args.kwargs["json"] == {"guid": "g-1", "respuesta": "Su saldo es 10",
                                                 "accion": "aprobar"}
        conv = operador.get("/api/conversacion/g-1").get_json()
        assert conv["estado"] == "completado"
        assert conv["respuesta"] == "Su saldo es 10"
        assert conv["accionadmin"] == "aprobar"

    def test_ya_respondida(self, operador, conversaciones):
        with patch("webhooks.requests.post") as post:
            r = operador.post("/api/enviar-respuesta", json={**self.BODY, "guid": "g-2"})
        assert r.status_code == 400
        assert r.get_json()["error"] == "La conversación ya fue respondida"
        post.assert_not_called()

    def test_segundo_envio_no_llama_al_webhook(self, operador, conversaciones):
        with patch("webhooks.requests.post") as post:
            post.return_value = Mock(status_code=200, text="ok")
            assert operador.post("/api/enviar-respuesta", json=self.BODY).status_code == 200
        with patch("webhooks.requests.post") as post:
            r = operador.post("/api/enviar-respuesta", json={**self.BODY, "respuesta": "otra"})
        assert r.status_code == 400
        post.assert_not_called()
        assert operador.get("/api/conversacion/g-1").get_json()["respuesta"] == "Su saldo es 10"

    def test_carrera_la_gana_otra_peticion(self, operador, conversaciones):
        # otra petición completa la conversación entre la lectura y el UPDATE
        def _otra_peticion(url):
            Conversacion.query.filter_by(guid="g-1").update({"estado": "completado", "respuesta": "primera"})
            db.session.commit()
            return True

        with patch("webhooks.enlace_valido", side_effect=_otra_peticion), \
                patch("webhooks.requests.post") as post:
            r = operador.post("/api/enviar-respuesta", json=self.BODY)
        assert r.status_code == 400
        assert r.get_json()["error"] == "La conversación ya fue respondida"
        post.assert_not_called()
        assert operador.get("/api/conversacion/g-1").get_json()["respuesta"] == "primera"

    def test_faltan_datos(self, operador, conversaciones):
        r = operador.post("/api/enviar-respuesta", json={"guid": "g-1", "respuesta": "x"})
        assert r.status_code == 400

    def test_conversacion_ajena(self, operador, conversaciones):
        r = operador.post("/api/enviar-respuesta", json={**self.BODY, "guid": "g-3"})
        assert r.status_code == 404

    def test_webhook_falla_estado_se_mantiene(self, operador, conversaciones):
        with patch("webhooks.requests.post") as post:
            post.return_value = Mock(status_code=500, text="boom")
            r = operador.post("/api/enviar-respuesta", json=self.BODY)
        assert r.status_code == 500
        assert r.get_json()["error"] == "Error al enviar respuesta"
        assert operador.get("/api/conversacion/g-1").get_json()["estado"] == "completado"

    def test_webhook_sin_conexion(self, operador, conversaciones):
        with patch("webhooks.requests.post", side_effect=requests.ConnectionError("down")):
            r = operador.post("/api/enviar-respuesta", json=self.BODY)
        assert r.status_code == 500


class TestEliminar:
    def test_admin_elimina(self, admin, conversaciones):
        r = admin.delete("/api/conversacion/g-3")
        assert r.status_code == 200
        assert admin.get("/api/conversacion/g-3").status_code == 404

    def test_no_admin_403(self, operador, conversaciones):
        assert operador.delete("/api/conversacion/g-1").status_code == 403
        assert operador.get("/api/conversacion/g-1").status_code == 200

    def test_inexistente(self, admin):
        assert admin.delete("/api/conversacion/nada").status_code == 404


class TestMediaInline:
    def test_imagen(self, operador, conversaciones):
        r = operador.get("/api/imagen-respuesta/g-1")
        assert r.status_code == 200
        assert r.mimetype == "image/png"
        assert r.data == PNG

    def test_sin_imagen(self, operador, conversaciones):
        assert operador.get("/api/imagen-respuesta/g-2").status_code == 404

    def test_video_malformado(self, operador, conversaciones):
        assert operador.get("/api/video-respuesta/g-2").status_code == 400

    def test_ajena(self, operador, conversaciones):
        assert operador.get("/api/imagen-respuesta/g-3").status_code == 404
