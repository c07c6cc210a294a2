"""
Equilibrium - run.py
Entry point for the interactive Equilibrium sandbox.
"""

import sys
from pathlib import Path

# Ensure we can import the project packages
project_root = Path(__file__).parent.resolve()
sys.path.insert(0, str(project_root))

from ui.renderer import Renderer
from ui.states import Engine
from ui.screens import SandboxState
from equilibrium.loop import SimulationLoop

def main():
    sim = SimulationLoop()
    if "--resume" in sys.argv:
        try:
            sim.resume_session()
        except FileNotFoundError as e:
            print(f"[Sandbox] Failed to resume session: {e}", file=sys.stderr)
            sim.open_session()
    else:
        sim.open_session()

    renderer = Renderer(width=80, height=50, title="Equilibrium Sandbox")
    engine = Engine(renderer, sim, SandboxState)
    engine.run()

if __name__ == "__main__":
    main()
