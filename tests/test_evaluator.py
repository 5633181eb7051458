import json
import threading

import numpy as np
import pytest

from tetris_ai.ai.evaluator import (
    DEFAULT_WEIGHTS,
    HeuristicEvaluator,
    WeightsLoadError,
    load_weights,
    save_weights,
)


def test_evaluate_is_dot_product():
    ev = HeuristicEvaluator((1.0, 2.0, -1.0, 0.5))
    assert ev.evaluate([4, 1, 2, 6]) == pytest.approx(4 + 2 - 2 + 3)
    assert ev.evaluate([4, 1, 2, 6], weights=(0, 1, 0, 0)) == pytest.approx(1)


def test_defaults():
    assert HeuristicEvaluator().weights == DEFAULT_WEIGHTS


@pytest.mark.parametrize("bad", [(1, 2, 3), (1, 2, 3, 4, 5), (1, 2, float("nan"), 4)])
def test_rejects_malformed_weights(bad):
    with pytest.raises(WeightsLoadError):
        HeuristicEvaluator(bad)
    ev = HeuristicEvaluator()
    with pytest.raises(ValueError):
        ev.set_weights(bad)
    assert ev.weights == DEFAULT_WEIGHTS


def test_npy_and_json_files(tmp_path):
    weights = (-0.4, 0.9, -0.2, -0.1)
    for name in ("w.npy", "nested/w.json"):
        path = str(tmp_path / name)
        save_weights(path, weights)
        assert load_weights(path) == pytest.approx(weights)


def test_json_plain_list(tmp_path):
    path = tmp_path / "w.json"
    path.write_text(json.dumps([1, 2, 3, 4]))
    assert load_weights(str(path)) == (1.0, 2.0, 3.0, 4.0)


def test_load_pretrained_swaps_weights(tmp_path):
    path = str(tmp_path / "w.npy")
    np.save(path, np.array([1.0, 0.0, 0.0, 0.0]))
    ev = HeuristicEvaluator()
    ev.load_pretrained(path)
    assert ev.weights == (1.0, 0.0, 0.0, 0.0)


@pytest.mark.parametrize("content", [None, "not json", json.dumps({"weights": [1, 2]}), json.dumps({"w": 1})])
def test_bad_file_keeps_previous_weights(tmp_path, content):
    path = tmp_path / "w.json"
    if content is not None:
        path.write_text(content)
    ev = HeuristicEvaluator((1, 1, 1, 1))
    with pytest.raises(WeightsLoadError):
        ev.load_pretrained(str(path))
    assert ev.weights == (1.0, 1.0, 1.0, 1.0)


def test_readers_never_see_a_mixed_vector():
    a = (1.0, 1.0, 1.0, 1.0)
    b = (2.0, 2.0, 2.0, 2.0)
    ev = HeuristicEvaluator(a)
    stop = threading.Event()

    def writer():
        while not stop.is_set():
            ev.set_weights(b)
            ev.set_weights(a)

    thread = threading.Thread(target=writer)
    thread.start()
    try:
        for _ in range(2000):
            assert ev.weights in (a, b)
    finally:
        stop.set()
        thread.join()
