import logging
from pathlib import Path

import discord
from discord.ext import commands
from dotenv import load_dotenv

from belfast.automod import InviteLinkDetectorService, WordBlacklistService
from belfast.command_handling import describe_error, error_reply, handle_command, make_prefix_getter
from belfast.config import get_settings
from belfast.database import JsonDatabase
from belfast.exceptions import BelfastError
from belfast.giveaways import GiveawayService
from belfast.pagination import PaginatedMessageService
from belfast.rewards import MessageRewardService

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler('belfast.log', encoding='utf-8', mode='a'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger('belfast_bot')

intents = discord.Intents.default()
intents.message_content = True
intents.members = True

bot = commands.Bot(
    command_prefix=make_prefix_getter(settings.bot_prefix),
    intents=intents,
    help_command=None,
    case_insensitive=True,
)

db = JsonDatabase(settings.database_path)

bot.settings = settings
bot.db = db

COGS = [
    'belfast.cogs.events',
    'belfast.cogs.moderation',
    'belfast.cogs.osu',
    'belfast.cogs.quaver',
    'belfast.cogs.otaku',
    'belfast.cogs.giveaway',
    'belfast.cogs.profile',
    'belfast.cogs.info',
]


async def load_cogs():
    """Load all bot cogs."""
    try:
        for cog in COGS:
            await bot.load_extension(cog)
        logger.info(f"Loaded {len(COGS)} cogs")
    except Exception as e:
        logger.error(f"Failed to load cogs: {e}")
        raise


@bot.event
async def setup_hook():
    """Setup hook called before bot connects to Discord.

    Loads the database, builds the services the cogs rely on and loads cogs.
    """
    await db.initialize()

    bot.paginator = PaginatedMessageService(bot, settings.pagination_buffer_size)
    bot.giveaways = GiveawayService(bot, db)
    bot.rewards = MessageRewardService(db)
    bot.invite_detector = InviteLinkDetectorService()
    bot.word_blacklist = WordBlacklistService(settings.get_blacklisted_words())
    logger.info("Services initialized")

    await load_cogs()


@bot.event
async def on_command_error(ctx, error):
    """Reply to the invoker with the reason a command failed."""
    if isinstance(error, commands.CommandInvokeError) and not isinstance(error.original, BelfastError):
        logger.error(f"Unhandled error in command {ctx.command}: {error.original}", exc_info=error.original)
    else:
        logger.info(f"Command failed for {ctx.author}: {error}")

    try:
        await ctx.send(error_reply(describe_error(error), settings.bot_prefix))
    except discord.HTTPException as e:
        logger.warning(f"Could not report command error: {e}")


@bot.event
async def on_message(message):
    """Route messages to commands, ignoring bots and unintentional prefixes."""
    await handle_command(bot, message, settings.bot_prefix, settings.command_timeout)


if __name__ == "__main__":
    bot.run(settings.discord_token, log_handler=None)
