"""
Wordle Party Server - Main Entry Point

Checks the word lists, creates the Flask-SocketIO application with its
record store and starts serving the HTTP API and the realtime game rooms.
"""

import argparse

from wordle_party import create_app
from wordle_party.config import SUPPORTED_LANGUAGES, config, get_config, get_word_statistics, validate_word_list_integrity
from wordle_party.utils.game_logger import game_logger


def parse_args():
    parser = argparse.ArgumentParser(description="Run the Wordle Party server")
    parser.add_argument('--env', choices=sorted(config),
                        help="Configuration profile to use (defaults to WORDLE_ENV)")
    parser.add_argument('--host', help="Override the bind address")
    parser.add_argument('--port', type=int, help="Override the port")
    return parser.parse_args()


def main():
    """Main function to initialize services and start the server."""
    args = parse_args()
    config_class = get_config(args.env)
    host = args.host or config_class.HOST
    port = args.port or config_class.PORT

    try:
        print("Checking word lists...")
        validate_word_list_integrity()
        for language in SUPPORTED_LANGUAGES:
            print(f"✓ {language}: {get_word_statistics(language)['total_words']} words")

        print("Creating Flask application...")
        app, socketio = create_app(config_class)
        print(f"✓ Flask application created successfully (store backend: {config_class.STORE_BACKEND})")

        game_logger.logger.info(f"Wordle Party server starting on {host}:{port}")

        print(f"\nStarting Wordle Party server on {host}:{port}")
        print(f"Debug mode: {config_class.DEBUG}")
        print("=" * 50)

        socketio.run(app, host=host, port=port, debug=config_class.DEBUG, allow_unsafe_werkzeug=True)

    except KeyboardInterrupt:
        print("\nServer shutting down...")
        game_logger.logger.info("Wordle Party server shutting down (KeyboardInterrupt)")
    except Exception as e:
        print(f"Error starting server: {e}")
        game_logger.logger.error(f"Error starting server: {e}")
        raise


if __name__ == '__main__':
    main()
