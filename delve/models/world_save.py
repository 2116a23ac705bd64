import datetime

from delve import db


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class WorldSave(db.Model):
    __tablename__ = "world_saves"
    id = db.Column(db.Integer, primary_key=True)
    slot = db.Column(db.String(64), unique=True, nullable=False)
    seed = db.Column(db.BigInteger, nullable=True)
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)
    # Full controller snapshot: history (areas inlined), connections, progression
    state = db.Column(db.JSON, default=dict)

    def __repr__(self):
        return f"<WorldSave {self.id} slot={self.slot} seed={self.seed}>"
