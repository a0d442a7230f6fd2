"""
Tests de administración de cuentas y catálogo de módulos
"""


NUEVA = {"usuario": "carla", "contrasena": "pw", "tipousuario": "Usuario",
         "nombre": "Carla", "correo": "carla@x.com", "telefono": "555", "modulos": ["tarifas"]}


class TestCuentasAdmin:
    def test_crear_no_devuelve_contrasena(self, admin):
        r = admin.post("/api/cuentas", json=NUEVA)
        assert r.status_code == 201
        body = r.get_json()
        assert body["usuario"] == "carla"
        assert body["estado"] == "activo"
        assert "contrasena" not in body

    def test_usuario_duplicado(self, admin):
        assert admin.post("/api/cuentas", json=NUEVA).status_code == 201
        r = admin.post("/api/cuentas", json={**NUEVA, "correo": "otro@x.com", "telefono": "556"})
        assert r.status_code == 400
        assert r.get_json()["error"] == "El nombre de usuario ya existe"

    def test_usuario_distingue_mayusculas(self, admin):
        assert admin.post("/api/cuentas", json=NUEVA).status_code == 201
        r = admin.post("/api/cuentas", json={**NUEVA, "usuario": "Carla",
                                             "correo": "otro@x.com", "telefono": "556"})
        assert r.status_code == 201

    def test_correo_y_telefono_duplicados(self, admin):
        admin.post("/api/cuentas", json=NUEVA)
        r = admin.post("/api/cuentas", json={**NUEVA, "usuario": "u2", "telefono": "556"})
        assert r.get_json()["error"] == "El correo electronico ya esta registrado"
        r = admin.post("/api/cuentas", json={**NUEVA, "usuario": "u3", "correo": "c3@x.com"})
        assert r.get_json()["error"] == "El telefono ya esta registrado"

    def test_tipousuario_invalido(self, admin):
        r = admin.post("/api/cuentas", json={**NUEVA, "tipousuario": "root"})
        assert r.status_code == 400

    def test_campos_requeridos(self, admin):
        r = admin.post("/api/cuentas", json={"usuario": "x"})
        assert r.status_code == 400

    def test_lista_sin_contrasenas(self, admin):
        admin.post("/api/cuentas", json=NUEVA)
        rows = admin.get("/api/cuentas").get_json()
        assert any(c["usuario"] == "carla" for c in rows)
        assert all("contrasena" not in c for c in rows)

    def test_actualizacion_parcial(self, admin, client):
        cid = admin.post("/api/cuentas", json=NUEVA).get_json()["id"]
        r = admin.put(f"/api/cuentas/{cid}", json={"estado": "bloqueado", "contrasena": ""})
        assert r.status_code == 200
        body = r.get_json()
        assert body["estado"] == "bloqueado"
        assert body["correo"] == "carla@x.com"
        # contraseña vacía no la cambia
        r = client.post("/api/auth/login", json={"usuario": "carla", "contrasena": "pw"})
        assert r.status_code == 403

    def test_cambio_de_contrasena(self, admin, client):
        cid = admin.post("/api/cuentas", json=NUEVA).get_json()["id"]
        admin.put(f"/api/cuentas/{cid}", json={"contrasena": "nueva"})
        assert client.post("/api/auth/login", json={"usuario": "carla", "contrasena": "pw"}).status_code == 401
        assert client.post("/api/auth/login", json={"usuario": "carla", "contrasena": "nueva"}).status_code == 200

    def test_actualizar_sin_campos(self, admin):
        cid = admin.post("/api/cuentas", json=NUEVA).get_json()["id"]
        r = admin.put(f"/api/cuentas/{cid}", json={})
        assert r.status_code == 400
        assert r.get_json()["error"] == "No hay campos para actualizar"

    def test_actualizar_inexistente(self, admin):
        assert admin.put("/api/cuentas/9999", json={"nombre": "x"}).status_code == 404

    def test_no_puede_borrarse_a_si_mismo(self, admin):
        r = admin.delete(f"/api/cuentas/{admin.cuenta_id}")
        assert r.status_code == 400
        assert r.get_json()["error"] == "No puede eliminar su propia cuenta"

    def test_borrar_otra_cuenta(self, admin):
        cid = admin.post("/api/cuentas", json=NUEVA).get_json()["id"]
        assert admin.delete(f"/api/cuentas/{cid}").status_code == 200
        assert admin.get(f"/api/cuentas/{cid}").status_code == 404


class TestCuentasUsuario:
    def test_usuario_no_administra_cuentas(self, cliente_como):
        c = cliente_como(telefono="555", modulos=["tarifas", "bancos"])
        assert c.get("/api/cuentas").status_code == 403
        assert c.post("/api/cuentas", json=NUEVA).status_code == 403
        r = c.delete(f"/api/cuentas/{c.cuenta_id}")
        assert r.status_code == 403

    def test_modulos_para_cualquier_sesion(self, cliente_como):
        c = cliente_como(telefono="555")
        r = c.get("/api/modulos")
        assert r.status_code == 200
        nombres = {m["nombre"] for m in r.get_json()}
        assert {"tarifas", "bancos", "preguntas"} <= nombres

    def test_modulos_sin_sesion(self, client):
        assert client.get("/api/modulos").status_code == 401
