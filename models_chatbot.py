# models_chatbot.py: conversaciones, necesidades y preguntas del bot
from datetime import datetime
from extensions import db
from utils import split_variantes


class Conversacion(db.Model):
    __tablename__ = "consultanecesidad"
    id              = db.Column(db.Integer, primary_key=True)
    guid            = db.Column(db.String(64), unique=True, nullable=False, index=True)
    creado          = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    telefonocliente = db.Column(db.String(40), index=True)
    telefonoempresa = db.Column(db.String(40), index=True)   # clave de tenant
    contexto        = db.Column(db.Text)
    pregunta        = db.Column(db.Text)
    estado          = db.Column(db.String(16), default="pendiente", index=True)  # pendiente|completado
    paso            = db.Column(db.String(64))
    enlace          = db.Column(db.String(500))               # callback del flujo externo
    accionadmin     = db.Column(db.String(64))
    respuesta       = db.Column(db.Text)
    imagen          = db.Column(db.Text)                      # data:image/...;base64,...
    video           = db.Column(db.Text)                      # data:video/...;base64,...
    bloqueado       = db.Column(db.Boolean, default=False)

    def to_dict(self, nombreusuario=None):
        return dict(
            id=self.id,
            guid=self.guid,
            creado=self.creado.isoformat() if self.creado else None,
            telefonocliente=self.telefonocliente,
            telefonoempresa=self.telefonoempresa,
            contexto=self.contexto,
            pregunta=self.pregunta,
            estado=self.estado,
            paso=self.paso,
            enlace=self.enlace,
            accionadmin=self.accionadmin,
            respuesta=self.respuesta,
            bloqueado=bool(self.bloqueado),
            tiene_imagen=bool(self.imagen),
            tiene_video=bool(self.video),
            nombreusuario=nombreusuario,
        )


class Necesidad(db.Model):
    __tablename__ = "necesidadessystem"
    id            = db.Column(db.Integer, primary_key=True)
    creado        = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    telefonocaso  = db.Column(db.String(40), index=True)
    categoria     = db.Column(db.String(120), nullable=False)
    necesidad     = db.Column(db.String(200), nullable=False)
    descripcion   = db.Column(db.Text)
    habilitado    = db.Column(db.Boolean, default=True, nullable=False)
    controlhumano = db.Column(db.Boolean, default=False, nullable=False)

    def to_dict(self):
        return dict(
            id=self.id,
            telefonocaso=self.telefonocaso,
            categoria=self.categoria,
            necesidad=self.necesidad,
            descripcion=self.descripcion,
            habilitado=self.habilitado,
            controlhumano=self.controlhumano,
        )


class Pregunta(db.Model):
    __tablename__ = "preguntassystem"
    id           = db.Column(db.Integer, primary_key=True)
    creado       = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    telefonocaso = db.Column(db.String(40), index=True)
    categoria    = db.Column(db.String(120), nullable=False)
    necesidad    = db.Column(db.String(200), nullable=False, index=True)
    pregunta     = db.Column(db.Text, nullable=False)
    respuesta    = db.Column(db.Text)
    variante     = db.Column(db.Text)          # alternativas separadas por ";"
    urlimagen    = db.Column(db.String(500))
    videourl     = db.Column(db.String(500))
    habilitado   = db.Column(db.Boolean, default=False, nullable=False)
    contexto     = db.Column(db.Text)
    enlace       = db.Column(db.String(500))

    def to_dict(self):
        return dict(
            id=self.id,
            telefonocaso=self.telefonocaso,
            categoria=self.categoria,
            necesidad=self.necesidad,
            pregunta=self.pregunta,
            respuesta=self.respuesta,
            variante=self.variante,
            variantes=split_variantes(self.variante),
            urlimagen=self.urlimagen,
            videourl=self.videourl,
            habilitado=self.habilitado,
            contexto=self.contexto,
            enlace=self.enlace,
        )
