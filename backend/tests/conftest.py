import pytest


@pytest.fixture
def spine_graph():
    """Corridor r1 with a bedroom and a kitchen off it."""
    return {
        "width": 40,
        "height": 40,
        "description": "hallway house",
        "rooms": [
            {"id": "r1", "name": "Hallway", "type": "corridor", "connections": ["r2", "r3"], "furniture": []},
            {"id": "r2", "name": "Bedroom", "type": "bedroom", "connections": ["r1"], "furniture": ["bed", "chest"]},
            {"id": "r3", "name": "Kitchen", "type": "kitchen", "connections": ["r1"], "furniture": ["table", "chair"]},
        ],
    }


@pytest.fixture
def hub_graph():
    """Living room with three spokes and one room hanging off a spoke."""
    return {
        "width": 48,
        "height": 44,
        "rooms": [
            {"id": "kitchen", "type": "kitchen", "connections": ["living"]},
            {"id": "living", "name": "Living Room", "type": "living", "connections": ["kitchen", "bed1", "bath"],
             "furniture": ["sofa", "tv", "rug"]},
            {"id": "bed1", "type": "bedroom", "connections": ["living", "bed2"]},
            {"id": "bath", "type": "bathroom", "connections": ["living"]},
            {"id": "bed2", "type": "bedroom", "connections": ["bed1"], "furniture": ["bed", "chest", "chest"]},
        ],
    }


@pytest.fixture
def twenty_room_graph():
    """Twenty rooms in a chain, none of them a corridor or a hub."""
    types = ["bedroom", "bathroom", "storage", "kitchen", "utility"]
    rooms = []
    for i in range(20):
        connections = [f"r{i + 1}"] if i < 19 else []
        rooms.append({"id": f"r{i}", "type": types[i % len(types)], "connections": connections})
    return {"width": 60, "height": 60, "rooms": rooms}


@pytest.fixture
def themed_graph():
    """A graph with themed room types used by the cave and hull generators."""
    return {
        "width": 44,
        "height": 44,
        "rooms": [
            {"id": "a", "type": "bridge", "connections": ["b", "c"]},
            {"id": "b", "type": "quarters", "connections": ["a"]},
            {"id": "c", "type": "lair", "connections": ["a"], "furniture": ["chest", "gold"]},
            {"id": "d", "type": "camp", "connections": ["c"]},
        ],
    }
