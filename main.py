# main.py
"""
Main entry point for the galaxy generator.

This script orchestrates the whole application lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Sets up the scene, the galaxy controller and the visualizer.
4. Generates the first galaxy and runs the render loop.
5. Handles clean shutdown.
"""
import logging
import sys
from utils import setup_logging, load_config, config_section, resolve_seed
import cProfile
import pstats
import io

def main(config_path: str = 'config.json'):
    """
    The main function to run the galaxy viewer.
    """
    # Load configuration from the JSON file first.
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config(config_path)
    except Exception as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    # Set up the logging system based on the loaded configuration.
    setup_logging(config)

    logging.info("--- Galaxy Generator Starting ---")

    galaxy_config = config_section(config, 'galaxy')
    run_params = config_section(config, 'run_control')
    vis_params = config_section(config, 'visualization')
    camera_params = config_section(config, 'camera')

    from galaxy import GalaxyController, GalaxyParameters
    from scene import Scene
    from visualization import Visualizer

    # --- Component Initialization ---
    params = GalaxyParameters.from_config(galaxy_config)
    scene = Scene()
    controller = GalaxyController(scene, params, seed=resolve_seed(galaxy_config))
    visualizer = Visualizer(controller, scene, vis_params, camera_params)

    controller.generate()

    profiler = cProfile.Profile() if run_params.get('profile', False) else None

    # Main render loop
    log_throttle = run_params.get('log_throttle_frames', 300)
    max_frames = run_params.get('max_frames') # None runs until the user quits

    running = True
    frame_num = 0

    if profiler is not None:
        profiler.enable()
    while running:
        # The visualizer's draw method controls the loop by checking for the
        # QUIT event. It returns False if the user quits. Panel commits
        # regenerate the galaxy inside this call.
        if not visualizer.draw():
            running = False
        visualizer.tick()
        frame_num += 1

        # Hot loops must throttle logs
        if frame_num % log_throttle == 0:
            logging.info(f"Frame {frame_num} | {visualizer.clock.get_fps():.1f} fps")
            cloud = controller.current_cloud
            logging.debug(f"Frame {frame_num} | Particles in scene: {cloud.count if cloud else 0}")

        # Check for max_frames exit condition
        if max_frames is not None and frame_num >= max_frames:
            logging.info(f"Reached max_frames ({max_frames}). Stopping.")
            running = False
    if profiler is not None:
        profiler.disable()

    controller.dispose()
    visualizer.close()
    logging.info("Render loop finished.")

    if profiler is not None:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20) # Print top 20 slowest functions
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Galaxy Generator Shutting Down ---")


def run():
    """Console entry point. Accepts an optional config path argument."""
    main(sys.argv[1] if len(sys.argv) > 1 else 'config.json')


if __name__ == "__main__":
    run()
