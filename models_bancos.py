# models_bancos.py
from datetime import datetime
from extensions import db


class Banco(db.Model):
    __tablename__ = "bancosdv0"
    __table_args__ = (
        db.UniqueConstraint("telefonocaso", "numerocuenta", name="uq_banco_tenant_cuenta"),
    )
    id             = db.Column(db.Integer, primary_key=True)
    creado         = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    modificado     = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    telefonocaso   = db.Column(db.String(40), index=True)
    nombre         = db.Column(db.String(200), nullable=False)
    numerocuenta   = db.Column(db.String(64), nullable=False)
    tipocuenta     = db.Column(db.String(64), nullable=False)   # ahorros|corriente|...
    identificacion = db.Column(db.String(64), nullable=False)
    correo         = db.Column(db.String(200))
    telefono       = db.Column(db.String(40))

    def to_dict(self):
        return {
            "id": self.id,
            "telefonocaso": self.telefonocaso,
            "nombre": self.nombre,
            "numerocuenta": self.numerocuenta,
            "tipocuenta": self.tipocuenta,
            "identificacion": self.identificacion,
            "correo": self.correo,
            "telefono": self.telefono,
            "creado": self.creado.isoformat() if self.creado else None,
            "modificado": self.modificado.isoformat() if self.modificado else None,
        }
