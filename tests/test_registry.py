import pytest

from jarcontrol import ConfigurationError
from jarcontrol.config import ActorBinding, default_actor_bindings
from jarcontrol.registry import ActorRegistry, ActorRegistryEntry, UnknownActorError
from jarcontrol.scene import Scene, SceneAnimator, SceneTransform


def test_default_bindings_resolve() -> None:
    scene = Scene()
    bindings = default_actor_bindings()
    for binding in bindings.values():
        scene.add_transform(binding.transform)
        scene.add_transform(binding.camera_focus)
        scene.add_animator(binding.animator)

    registry = ActorRegistry.from_bindings(bindings, scene)

    entry = registry.resolve("robot_kyle")
    assert entry.transform is scene.transform("robot_kyle")
    assert entry.camera_focus is scene.transform("robot_kyle_cam_point")
    assert entry.animator is scene.animator("robot_kyle")
    assert sorted(registry.names()) == ["banana_man", "robot_kyle"]
    assert "banana_man" in registry
    assert len(registry) == 2


def test_unknown_actor_raises_lookup_error() -> None:
    registry = ActorRegistry([])

    with pytest.raises(UnknownActorError) as excinfo:
        registry.resolve("mystery_guest")

    assert isinstance(excinfo.value, LookupError)
    assert excinfo.value.name == "mystery_guest"


def test_binding_to_missing_scene_object_is_configuration_error() -> None:
    scene = Scene()
    scene.add_transform("robot_kyle")
    scene.add_animator("robot_kyle")
    bindings = {
        "robot_kyle": ActorBinding(transform="robot_kyle", animator="robot_kyle", camera_focus="nowhere"),
    }

    with pytest.raises(ConfigurationError):
        ActorRegistry.from_bindings(bindings, scene)


def test_duplicate_actor_names_rejected() -> None:
    entry = ActorRegistryEntry("robot_kyle", SceneTransform("t"), SceneAnimator("a"), SceneTransform("f"))

    with pytest.raises(ConfigurationError):
        ActorRegistry([entry, entry])
