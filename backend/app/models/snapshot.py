from sqlalchemy import Column, Integer, String, Float, Text


class MovieSnapshotMixin:
    """Denormalized subset of TMDB metadata stored next to a movie record"""
    movie_id = Column(Integer, nullable=False, index=True)
    title = Column(String, nullable=False)
    poster_path = Column(String, nullable=True)
    release_date = Column(String, nullable=True)
    overview = Column(Text, nullable=True)
    vote_average = Column(Float, nullable=True)
    vote_count = Column(Integer, nullable=True)

    def apply_snapshot(self, snapshot: dict):
        for field in ("title", "poster_path", "release_date", "overview", "vote_average", "vote_count"):
            if field in snapshot:
                setattr(self, field, snapshot[field])
