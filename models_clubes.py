# models_clubes.py
from extensions import db


class Club(db.Model):
    __tablename__ = "clubesdv0"
    __table_args__ = (
        db.UniqueConstraint("telefonocaso", "nombre", name="uq_club_tenant_nombre"),
    )
    id           = db.Column(db.Integer, primary_key=True)
    nombre       = db.Column(db.String(200), nullable=False)
    telefonocaso = db.Column(db.String(40), index=True)

    def to_dict(self):
        return {"id": self.id, "nombre": self.nombre, "telefonocaso": self.telefonocaso}
