# models_tarifas.py
from extensions import db


class Tarifa(db.Model):
    __tablename__ = "tarifas_transporte"
    id             = db.Column(db.Integer, primary_key=True)
    telefonocaso   = db.Column(db.String(40), index=True)
    origen         = db.Column(db.String(200), nullable=False)
    destino        = db.Column(db.String(200), nullable=False, index=True)
    ciudad_destino = db.Column(db.String(200), nullable=False)
    precio         = db.Column(db.Numeric(12, 2), nullable=False)
    referencia     = db.Column(db.String(200))

    def to_dict(self):
        return {
            "id": self.id,
            "telefonocaso": self.telefonocaso,
            "origen": self.origen,
            "destino": self.destino,
            "ciudad_destino": self.ciudad_destino,
            "precio": float(self.precio) if self.precio is not None else None,
            "referencia": self.referencia,
        }
