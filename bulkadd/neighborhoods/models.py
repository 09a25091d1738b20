from dataclasses import dataclass


@dataclass(frozen=True)
class NeighborhoodRef:
    """Reference to a neighborhood row.

    ``assigned`` is False for the fallback variant. Its id is the configured
    sentinel, so ``neighborhood_id`` is never None; the storage layer maps the
    fallback to a real row before insert.
    """

    neighborhood_id: int
    neighborhood_name: str
    assigned: bool = True

    @classmethod
    def unassigned(
        cls,
        default_id: int = 1,
        default_name: str = "Default Neighborhood",
    ) -> "NeighborhoodRef":
        return cls(neighborhood_id=default_id, neighborhood_name=default_name, assigned=False)
