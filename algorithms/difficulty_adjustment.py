#!/usr/bin/env python3
"""
Standalone script to run the difficulty adjustment
Can be called directly from Node.js using child_process
"""
import sys
import json
import os
import logging

# Add parent directory to path to import algorithms
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from Modifier_Configs import load_config
from Session_Based import run_difficulty_adjustment


def main():
    """Main entry point for difficulty adjustment"""
    # Configure logging to stderr so stdout stays clean JSON for Node
    logging.basicConfig(stream=sys.stderr, level=logging.INFO)
    try:
        # Read input from stdin (JSON)
        input_data = json.loads(sys.stdin.read())
        if not isinstance(input_data, dict):
            raise ValueError("input must be a JSON object")
        logging.info({"event": "difficulty_adjust_input", "payload": input_data})

        user_id = input_data.get('user_id', 'unknown_user')
        # Player data may be nested under "player" or sent flat
        player = input_data.get('player', input_data)

        # Inline config wins over a config file path
        config = input_data.get('config')
        if config is None and input_data.get('config_path'):
            config = load_config(input_data['config_path'])

        result = run_difficulty_adjustment(player, config=config, user_id=user_id)

        output = {
            "success": True,
            "result": result
        }
        summary = result["Summary"]
        logging.info({
            "event": "difficulty_adjust_output",
            "user_id": user_id,
            "new_difficulty": summary["New_Difficulty"],
            "label": summary["Difficulty_Label"],
            "primary_reason": summary["Primary_Reason"],
        })
        print(json.dumps(output))

    except Exception as e:
        # Output error as JSON
        error_output = {
            "success": False,
            "error": str(e)
        }
        logging.exception({"event": "difficulty_adjust_error", "error": str(e)})
        print(json.dumps(error_output))
        sys.exit(1)


if __name__ == '__main__':
    main()
