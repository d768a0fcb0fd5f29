import ast
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

SRC = Path(__file__).resolve().parents[2] / "src"
PACKAGE = SRC / "gigsim"

# A layer may only import layers listed for it; the composition root wires everything.
ALLOWED_LAYERS = {
    "domain": {"domain"},
    "application": {"domain", "application"},
    "infrastructure": {"domain", "application", "infrastructure"},
    "presentation": {"domain", "application", "presentation"},
}
COMPOSITION_ROOT = {"gigsim.bootstrap", "gigsim.__main__"}

# Third-party stacks are pinned to the layer that owns their concern.
LIBRARY_HOMES = {
    "sqlalchemy": ("gigsim.infrastructure.db",),
    "httpx": ("gigsim.infrastructure",),
    "rich": ("gigsim.presentation",),
    "dotenv": ("gigsim.__main__",),
}


def _module_name(path: Path) -> str:
    parts = path.relative_to(SRC).with_suffix("").parts
    return ".".join(parts[:-1] if parts[-1] == "__init__" else parts)


def _imports(module: str, tree: ast.AST) -> set[str]:
    found: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom):
            if node.level:
                base = module.split(".")[: -node.level]
                found.add(".".join(base + ([node.module] if node.module else [])))
            elif node.module:
                found.add(node.module)
    return found


def _import_map() -> dict[str, set[str]]:
    return {
        _module_name(path): _imports(_module_name(path), ast.parse(path.read_text(encoding="utf-8")))
        for path in sorted(PACKAGE.rglob("*.py"))
    }


def _layer(module: str) -> str | None:
    parts = module.split(".")
    if len(parts) > 1 and parts[0] == "gigsim" and parts[1] in ALLOWED_LAYERS:
        return parts[1]
    return None


class LayeringTests(unittest.TestCase):
    def test_every_module_sits_in_a_layer_or_the_composition_root(self) -> None:
        stray = [
            module
            for module in _import_map()
            if module != "gigsim" and _layer(module) is None and module not in COMPOSITION_ROOT
        ]
        self.assertEqual([], stray)

    def test_layers_only_import_downward(self) -> None:
        violations = []
        for module, targets in _import_map().items():
            layer = _layer(module)
            if layer is None:
                continue
            for target in sorted(targets):
                target_layer = _layer(target)
                if target in COMPOSITION_ROOT or (target_layer and target_layer not in ALLOWED_LAYERS[layer]):
                    violations.append(f"{module} -> {target}")

        self.assertEqual([], violations)

    def test_third_party_stacks_stay_in_their_layer(self) -> None:
        violations = []
        for module, targets in _import_map().items():
            for target in targets:
                library = target.split(".")[0]
                homes = LIBRARY_HOMES.get(library)
                if homes and not module.startswith(homes):
                    violations.append(f"{module} uses {library}")

        self.assertEqual([], sorted(violations))

    def test_application_services_depend_on_repository_protocols(self) -> None:
        imports = _import_map()["gigsim.application.services.simulation_service"]

        self.assertIn("gigsim.domain.repositories", imports)
        self.assertFalse(any(target.startswith("gigsim.infrastructure") for target in imports))


if __name__ == "__main__":
    unittest.main()
