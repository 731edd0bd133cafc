"""演示数据。"""

from home_interpreter.models import Device


DEMO_ROOMS = ["Living Room", "Kitchen", "Bedroom", "Office", "Trägården"]


DEMO_DEVICES = [
    Device(
        id="light-1",
        name="Ceiling Light",
        room="Living Room",
        device_class="light",
        capabilities={"onoff": True, "dim": 0.75},
    ),
    Device(
        id="light-2",
        name="Floor Lamp",
        room="Living Room",
        device_class="light",
        capabilities={"onoff": False, "dim": 0.3},
    ),
    Device(
        id="speaker-1",
        name="Sonos One",
        room="Living Room",
        device_class="speaker",
        capabilities={"speaker_playing": True, "volume_set": 0.4},
    ),
    Device(
        id="light-3",
        name="Kitchen Spots",
        room="Kitchen",
        device_class="light",
        capabilities={"onoff": True, "dim": 1.0, "light_temperature": 3000},
    ),
    Device(
        id="socket-1",
        name="Coffee Machine",
        room="Kitchen",
        device_class="socket",
        capabilities={"onoff": False, "measure_power": 0},
    ),
    Device(
        id="socket-2",
        name="Bedroom Lamp Plug",
        room="Bedroom",
        device_class="socket",
        capabilities={"onoff": True, "measure_power": 7.5},
    ),
    Device(
        id="thermostat-1",
        name="Bedroom Thermostat",
        room="Bedroom",
        device_class="thermostat",
        capabilities={"target_temperature": 21, "measure_temperature": 19.5},
    ),
    Device(
        id="sensor-1",
        name="Office Climate Sensor",
        room="Office",
        device_class="sensor",
        capabilities={"measure_temperature": 22.1, "measure_humidity": 41},
    ),
    Device(
        id="lock-1",
        name="Front Door Lock",
        room=None,
        device_class="lock",
        capabilities={"locked": True},
    ),
    Device(
        id="light-4",
        name="Garden Lights",
        room="Trägården",
        device_class="light",
        available=False,
        capabilities={"onoff": False},
    ),
]
