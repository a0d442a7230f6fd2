# models_formularios.py: solicitudes que llegan desde el formulario del bot
from datetime import datetime
from extensions import db


class Formulario(db.Model):
    __tablename__ = "formdv0"
    id                  = db.Column(db.Integer, primary_key=True)
    creado              = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    telefonocaso        = db.Column(db.String(40), index=True)
    telefono            = db.Column(db.String(40), nullable=False)
    nombre              = db.Column(db.String(200))
    cuenta              = db.Column(db.String(120))
    tiposolicitud       = db.Column(db.String(64), index=True)   # deposito|retiro|...
    cantidadfondos      = db.Column(db.Numeric(14, 2))
    cuentatransferencia = db.Column(db.String(120))
    datosconversion     = db.Column(db.JSON)
    guid                = db.Column(db.String(64))
    club                = db.Column(db.String(200))
    enlace              = db.Column(db.String(500))
    urlimagen           = db.Column(db.String(500))
    bancodeposito       = db.Column(db.String(200))

    def to_dict(self):
        return dict(
            id=self.id,
            creado=self.creado.isoformat() if self.creado else None,
            telefonocaso=self.telefonocaso,
            telefono=self.telefono,
            nombre=self.nombre,
            cuenta=self.cuenta,
            tiposolicitud=self.tiposolicitud,
            cantidadfondos=float(self.cantidadfondos) if self.cantidadfondos is not None else None,
            cuentatransferencia=self.cuentatransferencia,
            datosconversion=self.datosconversion,
            guid=self.guid,
            club=self.club,
            enlace=self.enlace,
            urlimagen=self.urlimagen,
            bancodeposito=self.bancodeposito,
        )
