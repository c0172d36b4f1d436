"""Tests for the built-in scene and JSON scene files.

Tests cover:
- Default scene contents and camera
- Saving and loading a scene file
- Malformed scene documents, which leave the current scene untouched
"""

import json
import math

import pytest


class TestDefaultScene:
    """Tests for create_default_scene."""

    def test_four_spheres_four_materials(self):
        """Test the reference scene layout."""
        from glint.scene.manager import MaterialType
        from glint.scene.presets import create_default_scene

        scene, _ = create_default_scene()
        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4

        types = [scene.get_material_type_python(i) for i in range(4)]
        assert types == [
            MaterialType.LAMBERTIAN,
            MaterialType.LAMBERTIAN,
            MaterialType.DIELECTRIC,
            MaterialType.METAL,
        ]

    def test_ground_sphere(self):
        """Test the ground is a large yellow diffuse sphere."""
        from glint.scene.presets import create_default_scene

        scene, _ = create_default_scene()
        config = scene.to_config()
        ground = config.spheres[1]
        assert ground["center"] == pytest.approx([0.0, -100.5, -1.0])
        assert ground["radius"] == pytest.approx(100.0)
        material = config.materials[ground["material_id"]]
        assert material["type"] == "lambertian"
        assert material["albedo"] == pytest.approx([0.8, 0.8, 0.0])

    def test_camera(self):
        """Test the reference camera is focused on its target."""
        from glint.scene.presets import create_default_scene

        _, camera = create_default_scene(aspect_ratio=2.0)
        assert camera.lookfrom == (3.0, 3.0, 2.0)
        assert camera.lookat == (0.0, 0.0, -1.0)
        assert camera.vfov == pytest.approx(20.0)
        assert camera.aperture == pytest.approx(2.0)
        assert camera.aspect_ratio == pytest.approx(2.0)
        assert camera.focus_dist == pytest.approx(math.sqrt(27.0))


class TestSceneFiles:
    """Tests for save_scene, load_scene and scene_from_dict."""

    def test_save_and_load(self, tmp_path):
        """Test a saved scene loads back with the same spheres and camera."""
        from glint.scene.loader import load_scene, save_scene
        from glint.scene.presets import create_default_scene

        scene, camera = create_default_scene()
        expected = scene.to_dict()
        path = tmp_path / "scene.json"
        save_scene(path, scene, camera)

        loaded_scene, loaded_camera = load_scene(path)
        assert loaded_scene.to_dict() == expected
        assert loaded_camera == camera

    def test_aspect_override(self):
        """Test the aspect ratio argument overrides the file."""
        from glint.scene.loader import scene_from_dict

        data = {
            "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            "spheres": [{"center": [0, 0, -1], "radius": 0.5, "material_id": 0}],
            "camera": {"aspect_ratio": 1.0},
        }
        scene, camera = scene_from_dict(data, aspect_ratio=3.0)
        assert scene.get_sphere_count() == 1
        assert camera.aspect_ratio == pytest.approx(3.0)

    def test_missing_camera_uses_defaults(self):
        """Test a document without a camera gets the default camera."""
        from glint.camera.thin_lens import ThinLensCamera
        from glint.scene.loader import scene_from_dict

        _, camera = scene_from_dict({"materials": [], "spheres": []})
        assert camera.vfov == ThinLensCamera().vfov
        assert camera.lookfrom == ThinLensCamera().lookfrom

    def test_invalid_json(self, tmp_path):
        """Test a file that is not JSON raises ValueError."""
        from glint.scene.loader import load_scene

        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_scene(path)

    def test_not_an_object(self, tmp_path):
        """Test a JSON array raises ValueError."""
        from glint.scene.loader import load_scene

        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_scene(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises OSError."""
        from glint.scene.loader import load_scene

        with pytest.raises(OSError):
            load_scene(tmp_path / "absent.json")

    def test_bad_camera(self):
        """Test an invalid camera is rejected."""
        from glint.scene.loader import scene_from_dict

        with pytest.raises(ValueError):
            scene_from_dict({"materials": [], "spheres": [], "camera": {"vfov": 0}})

    @pytest.mark.parametrize(
        "data",
        [
            {"materials": "lambertian"},
            {"materials": [1]},
            {"materials": [{"type": "lambertian", "albedo": 0.5}]},
            {"materials": [{"type": "metal", "albedo": [0.5, 0.5, 0.5], "roughness": "rough"}]},
            {"materials": [{"type": 3}]},
            {"spheres": {"center": [0, 0, -1]}},
            {
                "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                "spheres": [{"center": 1.0, "radius": 0.5, "material_id": 0}],
            },
            {
                "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
                "spheres": [{"center": [0, 0, -1], "radius": "big", "material_id": 0}],
            },
            {"camera": 5},
            {"camera": {"lookfrom": 3}},
            {"camera": {"lookfrom": [0, 0]}},
            {"camera": {"vfov": "wide"}},
        ],
    )
    def test_malformed_documents_raise_value_error(self, data):
        """Test wrongly typed fields are reported as ValueError."""
        from glint.scene.loader import scene_from_dict

        with pytest.raises(ValueError):
            scene_from_dict(data)

    @pytest.mark.parametrize(
        "bad_sphere",
        [
            {"center": [0, 0, -1], "radius": -1.0, "material_id": 0},
            {"center": [0, 0, -1], "radius": 0.5, "material_id": 5},
        ],
    )
    def test_rejected_document_keeps_current_scene(self, bad_sphere):
        """Test a document that fails validation leaves the loaded scene intact."""
        from glint.scene.loader import scene_from_dict
        from glint.scene.presets import create_default_scene

        scene, _ = create_default_scene()
        expected = scene.to_dict()

        data = {
            "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            "spheres": [{"center": [0, 0, -2], "radius": 1.0, "material_id": 0}, bad_sphere],
        }
        with pytest.raises(ValueError):
            scene_from_dict(data)

        assert scene.get_sphere_count() == 4
        assert scene.get_material_count() == 4
        assert scene.to_dict() == expected
