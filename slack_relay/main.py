"""
Main entry point for the Slack AI relay.
"""

import argparse
import logging

import uvicorn
from fastapi import FastAPI

from slack_relay.relay.event_relay import EventRelay, build_relay
from slack_relay.routers import slack_events
from slack_relay.utils.config import load_app_config
from slack_relay.utils.logger import setup_logger

logger = logging.getLogger(__name__)


def create_app(relay: EventRelay) -> FastAPI:
    """Create the FastAPI app serving the Slack webhook."""
    app = FastAPI(title="slack-ai-relay")
    app.state.relay = relay
    app.include_router(slack_events.router)

    @app.get("/")
    def read_root():
        return {"message": "Slack AI relay is ready"}

    return app


def main():
    """Main CLI interface."""
    parser = argparse.ArgumentParser(
        description="Relay Slack conversations to a conversational-AI provider."
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Interface to bind the webhook server to",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the webhook server",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file with tokens and bot identity",
    )
    parser.add_argument(
        "--provider-config",
        help="Path to the provider YAML file (default: config/provider.yaml)",
    )

    args = parser.parse_args()

    config = load_app_config(env_path=args.env_file, provider_config_path=args.provider_config)
    setup_logger(log_level=config.log_level)

    app = create_app(build_relay(config))

    logger.info(f"Starting Slack relay on {args.host}:{args.port}...")
    uvicorn.run(app, host=args.host, port=args.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
