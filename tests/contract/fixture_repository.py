from petstore.database.memory import InMemoryPetStore


class FixturePetRepository(InMemoryPetStore):
    """In-memory store that records every fixture seeding applied to it."""

    def __init__(self):
        super().__init__()
        self.seeds = []

    def reset(self, pets=(), next_id=1):
        pets = list(pets)
        self.seeds.append(([p.id for p in pets], next_id))
        super().reset(pets, next_id=next_id)
