"""
Flask Backend API for Algorithm Testing
Provides REST endpoints to exercise the difficulty engine from the front-end.
"""

from flask import Flask, request, jsonify
from flask_cors import CORS
import sys
import os

# Add parent directory to path to import algorithms
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from DDA_Models import AggregationStrategy, SignalResult
from Game_Stats import GameStats, generate_config
from Modifier_Aggregator import aggregate
from Modifier_Configs import config_from_dict, config_to_dict
from Session_Based import evaluate_modifier, run_difficulty_adjustment

app = Flask(__name__)
CORS(app)  # Enable CORS for front-end requests


def _format_summary(player_name, result):
    summary = result.get("Summary", {})
    return {
        "player_name": player_name,
        "old_difficulty": summary.get("Previous_Difficulty"),
        "new_difficulty": summary.get("New_Difficulty"),
        "adjustment": summary.get("Adjustment", 0),
        "difficulty_label": summary.get("Difficulty_Label", "Unknown"),
        "primary_reason": summary.get("Primary_Reason"),
        "active_modifiers": summary.get("Active_Modifiers", []),
    }


def _signals_from_payload(data):
    # Accept [{"name": ..., "value": ...}] or plain numbers
    signals = []
    for idx, item in enumerate(data.get('signals', [])):
        if isinstance(item, dict):
            signals.append(SignalResult(
                name=str(item.get('name', f'Signal_{idx+1}')),
                value=float(item.get('value', 0.0)),
                reason=str(item.get('reason', '')),
            ))
        else:
            signals.append(SignalResult(name=f'Signal_{idx+1}', value=float(item)))
    return signals


@app.route('/api/health', methods=['GET'])
def health():
    """Health check endpoint"""
    return jsonify({"status": "ok", "message": "Difficulty testing API is running"})


@app.route('/api/difficulty/calculate', methods=['POST'])
def calculate_difficulty():
    """
    Run a full difficulty calculation.
    Supports both a single player and batch processing (multiple players).

    Single player JSON payload:
    {
        "player_name": str (optional),
        "current_difficulty": float,
        "win_streak": int,
        "loss_streak": int,
        "total_wins": int,
        "total_losses": int,
        "hours_since_last_play": float (optional),
        "last_quit_type": str (optional),
        ...
        "config": dict (optional)
    }

    Batch JSON payload:
    {
        "players": [player_dicts...],
        "config": dict (optional, applies to all)
    }
    """
    try:
        data = request.json
        config = data.get('config')
        if config is not None:
            config = config_from_dict(config)

        if 'players' in data and isinstance(data.get('players'), list):
            players = data.get('players', [])
            if not players:
                raise ValueError("'players' must be a non-empty list")

            results = []
            for idx, player in enumerate(players):
                try:
                    player_name = player.get('player_name') or player.get('user_id') or f'Player_{idx+1}'
                    result = run_difficulty_adjustment(player, config=config, user_id=player_name)
                    entry = _format_summary(player_name, result)
                    entry["player_index"] = idx + 1
                    entry["full_details"] = result
                    results.append(entry)
                except Exception as e:
                    # If one player fails, include error in result
                    results.append({
                        "player_index": idx + 1,
                        "player_name": player.get('player_name', f'Player_{idx+1}') if isinstance(player, dict) else f'Player_{idx+1}',
                        "error": str(e)
                    })

            return jsonify({
                "success": True,
                "result": {
                    "batch_mode": True,
                    "players": results,
                    "summary": {
                        "total_players": len(players),
                        "processed": len([r for r in results if "error" not in r]),
                        "failed": len([r for r in results if "error" in r])
                    }
                }
            })

        player_name = data.get('player_name') or data.get('user_id') or 'Player'
        result = run_difficulty_adjustment(data, config=config, user_id=player_name)
        return jsonify({
            "success": True,
            "result": {
                "batch_mode": False,
                "summary": _format_summary(player_name, result),
                "full_details": result  # Include full details for advanced users
            }
        })

    except Exception as e:
        return jsonify({
            "success": False,
            "error": str(e)
        }), 400


@app.route('/api/aggregate', methods=['POST'])
def aggregate_signals():
    """
    Combine raw signal values with one aggregation strategy.

    Expected JSON payload:
    {
        "signals": [{"name": str, "value": float}, ...] or [float, ...],
        "strategy": str (optional, default: "diminishing_returns"),
        "factor": float (optional, default: 0.6),
        "weights": dict (optional, name -> weight)
    }
    """
    try:
        data = request.json
        signals = _signals_from_payload(data)
        strategy = AggregationStrategy.from_name(
            data.get('strategy', 'diminishing_returns'),
            float(data.get('factor', 0.6))
        )
        raw = aggregate(signals, strategy, data.get('weights'))

        return jsonify({
            "success": True,
            "result": {
                "strategy": strategy.kind.value,
                "factor": strategy.factor,
                "raw_delta": round(raw, 4),
                "signal_count": len(signals)
            }
        })

    except Exception as e:
        return jsonify({
            "success": False,
            "error": str(e)
        }), 400


@app.route('/api/modifier/<name>', methods=['POST'])
def run_modifier(name):
    """
    Evaluate one modifier in isolation.

    Expected JSON payload: the player fields used by that modifier, plus an
    optional "config" dict.
    """
    try:
        data = request.json or {}
        result = evaluate_modifier(name, data, config=data.get('config'))
        return jsonify({
            "success": True,
            "result": result.to_dict()
        })

    except Exception as e:
        return jsonify({
            "success": False,
            "error": str(e)
        }), 400


@app.route('/api/config/generate', methods=['POST'])
def generate_config_from_stats():
    """
    Generate a full config from game statistics.

    Expected JSON payload:
    {
        "game_stats": dict (optional, missing fields use typical mobile values)
    }
    """
    try:
        data = request.json or {}
        stats = GameStats.from_dict(data.get('game_stats', {}))
        ok, message = stats.validate()
        if not ok:
            raise ValueError(message)
        config = generate_config(stats)

        return jsonify({
            "success": True,
            "result": config_to_dict(config)
        })

    except Exception as e:
        return jsonify({
            "success": False,
            "error": str(e)
        }), 400


@app.route('/api/test', methods=['POST'])
def test_custom():
    """
    Generic test endpoint that accepts function name and arguments.

    Expected JSON payload:
    {
        "function": str,  # "difficulty_calculate", "modifier", "aggregate", "generate_config"
        "args": dict       # Arguments for the function
    }
    """
    try:
        data = request.json
        func_name = data.get('function', '').lower()
        args = data.get('args', {})

        if func_name == 'difficulty_calculate':
            result = run_difficulty_adjustment(args.get('player', {}), config=args.get('config'))
        elif func_name == 'modifier':
            result = evaluate_modifier(args['name'], args.get('player', {}), config=args.get('config')).to_dict()
        elif func_name == 'aggregate':
            strategy = AggregationStrategy.from_name(args.get('strategy', 'diminishing_returns'), float(args.get('factor', 0.6)))
            result = aggregate(_signals_from_payload(args), strategy, args.get('weights'))
        elif func_name == 'generate_config':
            stats = GameStats.from_dict(args.get('game_stats', {}))
            ok, message = stats.validate()
            if not ok:
                raise ValueError(message)
            result = config_to_dict(generate_config(stats))
        else:
            return jsonify({
                "success": False,
                "error": f"Unknown function: {func_name}. Available: difficulty_calculate, modifier, aggregate, generate_config"
            }), 400

        return jsonify({
            "success": True,
            "result": result
        })

    except Exception as e:
        return jsonify({
            "success": False,
            "error": str(e)
        }), 400


if __name__ == '__main__':
    print("Starting Difficulty Testing API on http://localhost:5000")
    print("API Endpoints:")
    print("  GET  /api/health")
    print("  POST /api/difficulty/calculate")
    print("  POST /api/aggregate")
    print("  POST /api/modifier/<name>")
    print("  POST /api/config/generate")
    print("  POST /api/test")
    app.run(debug=True, port=5000)
