import logging
from datetime import datetime, timezone
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from app.config import config

logger = logging.getLogger(__name__)

class SlackService:
    def __init__(self, token: str = None, channel: str = None, mentions: str = None, client: WebClient = None):
        self.token = token if token is not None else config.SLACK_BOT_TOKEN
        self.status_channel = channel or config.SLACK_CHANNEL_JOB_STATUS
        self.client = client or (WebClient(token=self.token) if self.token else None)

        # Format mentions: <@U123>, <@U456>
        raw_mentions = mentions if mentions is not None else (config.SLACK_MENTIONS or "")
        self.mentions = " ".join([f"<@{m.strip()}>" for m in raw_mentions.split(",") if m.strip()])

        if not self.client:
            logger.warning("SLACK_BOT_TOKEN not provided. Slack notifications will be disabled.")

    def _get_timestamp_block(self):
        now = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        return {
            "type": "context",
            "elements": [
                {
                    "type": "mrkdwn",
                    "text": f"🕒 *Time:* {now}"
                }
            ]
        }

    def send_domain_status(self, domain: str, status: str, message: str):
        """
        Sends a notification about a domain job reaching a terminal state.
        """
        failed = status == "error"
        title = f"❌ {domain} failed" if failed else f"✅ {domain} described"
        blocks = [
            {
                "type": "header",
                "text": {
                    "type": "plain_text",
                    "text": title,
                    "emoji": True
                }
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"*Status:* {status}\n*{'Error' if failed else 'Description'}:* {message}"
                }
            }
        ]

        if failed and self.mentions:
            blocks.append({
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"🚨 Attention: {self.mentions}"
                }
            })

        blocks.append(self._get_timestamp_block())
        return self._send_blocks(self.status_channel, blocks, f"{domain}: {status}")

    def _send_blocks(self, channel: str, blocks: list, fallback_text: str):
        if not self.client:
            return

        try:
            response = self.client.chat_postMessage(
                channel=channel,
                blocks=blocks,
                text=fallback_text
            )
            logger.info(f"Slack blocks sent successfully to {channel}")
            return response
        except SlackApiError as e:
            logger.error(f"Error sending Slack blocks to {channel}: {e.response['error']}")
            return None

slack_service = SlackService()
