import threading
from io import BytesIO

import pytest
from PIL import Image

from src import config
from src.image_encoder import ImagePayload


def make_png(size=(32, 24), color=(200, 30, 30)) -> bytes:
    out = BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


class FakeInference:
    """
    Stand-in for InferenceClient.

    Responses may be a string, an exception to raise, or a list consumed
    one entry per call. hold(kind) makes the next calls of that kind (or of
    every kind) block until release(). `peak` records the most calls of one
    kind that were running at the same time.
    """

    def __init__(
        self,
        items="Milk\nEggs\nCheddar cheese",
        nutrition="Calories: 150cal\nFat: 8g\nSodium: 120mg\nCarbohydrates: 12g\nFiber: 0g\nProtein: 8g",
        recipes="Here are some ideas:\n1. Omelette\nEggs and cheese.\n2. Milkshake\nBlend milk.\n3. Cheese toast\nToast it.",
    ):
        self.items = items
        self.nutrition = nutrition
        self.recipes = recipes
        self.calls = []
        self.started = threading.Event()
        self.peak = {}
        self._running = {}
        self._lock = threading.Lock()
        self._gate = None
        self._held_kind = None

    def hold(self, kind=None):
        self.started.clear()
        self._held_kind = kind
        self._gate = threading.Event()

    def release(self):
        if self._gate is not None:
            self._gate.set()

    def _answer(self, kind, response):
        with self._lock:
            self._running[kind] = self._running.get(kind, 0) + 1
            self.peak[kind] = max(self.peak.get(kind, 0), self._running[kind])
        try:
            if self._gate is not None and self._held_kind in (None, kind):
                self.started.set()
                self._gate.wait(5)
            if isinstance(response, list):
                response = response.pop(0)
            if isinstance(response, BaseException):
                raise response
            return response
        finally:
            with self._lock:
                self._running[kind] -= 1

    def count(self, kind):
        return len([c for c in self.calls if c[0] == kind])

    def identify_items(self, image):
        self.calls.append(("identify", image.media_type))
        return self._answer("identify", self.items)

    def lookup_nutrition(self, item_name):
        self.calls.append(("nutrition", item_name))
        return self._answer("nutrition", self.nutrition)

    def suggest_recipes(self, items):
        self.calls.append(("recipes", tuple(items)))
        return self._answer("recipes", self.recipes)


@pytest.fixture(autouse=True)
def _encoder_defaults(monkeypatch):
    monkeypatch.setattr(config, "USE_BACKEND_RESIZE", True)
    monkeypatch.setattr(config, "BACKEND_MAX_SIDE_PX", 1024)


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def payload(png_bytes):
    return ImagePayload(data=png_bytes, media_type="image/png", filename="fridge.png")


@pytest.fixture
def fake_inference():
    return FakeInference()
