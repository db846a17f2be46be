"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Song Validation Errors
    EMPTY_SONG_ID = "Song ID cannot be empty"
    EMPTY_SONG_URL = "Song URL cannot be empty"

    # Settings Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds 64-bit range"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_BASE_URL = "Generation backend URL must start with http:// or https://"

    # Audio Errors
    DOWNLOAD_FAILED = "yt-dlp exited with code {code}: {stderr}"
    DOWNLOADED_FILE_MISSING = "Downloaded file {path} never appeared"
    DOWNLOADED_FILE_EMPTY = "Downloaded file {path} is empty"
    TRANSCODE_FAILED = "ffmpeg exited with code {code}: {stderr}"
    PLAYER_NOT_SUBSCRIBED = "Audio player is not subscribed to a voice connection"
    VOICE_CLIENT_MISSING = "No voice client is available for guild {guild_id}"

    # Voice Errors
    VOICE_CONNECT_EXHAUSTED = "Failed to connect to voice channel after {attempts} attempts"
    VOICE_CONNECTION_DESTROYED = "Voice connection was destroyed"
    GUILD_NOT_FOUND = "Guild {guild_id} not found"
    CHANNEL_NOT_VOICE = "Channel {channel_id} is not a voice channel"

    # Generation Errors
    GENERATION_HTTP_ERROR = "Ollama API error: {status} {reason}"
    GENERATION_REQUEST_FAILED = "Generation request failed: {error}"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Session Lifecycle
    SESSION_CREATED = "Created playback session for guild %s in channel %s"
    SESSION_REUSED_CONNECTION = "Reusing existing voice connection for guild %s"
    SESSION_DESTROYED = "Destroyed playback session for guild %s (%s)"
    SESSION_ALREADY_GONE = "No session for guild %s, nothing to tear down"

    # Queue Operations
    SONG_ENQUEUED = "Queued '%s' in guild %s at position %d"
    SONG_SKIPPED = "Skipping '%s' in guild %s"
    QUEUE_FINISHED = "Queue finished in guild %s, session is idle"
    LOOP_TOGGLED = "Loop mode %s in guild %s"
    VOLUME_SET = "Volume for guild %s set to %d%% (applies to next song)"

    # Playback
    PLAYBACK_LOADING = "Loading '%s' for guild %s"
    PLAYBACK_STARTED = "Now playing '%s' in guild %s"
    PLAYBACK_SONG_FAILED = "Failed to play '%s' in guild %s"
    PLAYBACK_PLAYER_ERROR = "Audio player error in guild %s: %s"
    PLAYBACK_SONG_ENDED = "Song '%s' ended in guild %s (loop=%s)"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_STALE_EVENT = "Ignoring player event for destroyed session in guild %s"
    NOTICE_SEND_FAILED = "Failed to post notice in guild %s: %s"

    # Voice Connection
    VOICE_CONNECT_ATTEMPT = "Voice connect attempt %d/%d for guild %s"
    VOICE_CONNECT_FAILED_ATTEMPT = "Voice connect attempt %d/%d failed for guild %s: %s"
    VOICE_CONNECT_BACKOFF = "Retrying voice connect for guild %s in %.1fs"
    VOICE_CONNECT_GAVE_UP = "Could not join voice in guild %s: %s"
    VOICE_CONNECTED = "Voice connection ready for guild %s"
    VOICE_STILL_SIGNALLING = "Voice connection for guild %s still signalling, waiting for ready"
    VOICE_DISCONNECTED = "Voice connection lost in guild %s, waiting %.0fs to reconnect"
    VOICE_RECONNECTING = "Voice connection for guild %s is reconnecting"
    VOICE_RECONNECT_FAILED = "Voice connection for guild %s could not be restored"
    VOICE_REJOINING = "Voice connection for guild %s not ready, rejoining"
    VOICE_STATUS_CHANGED = "Voice connection for guild %s: %s -> %s"
    VOICE_DESTROY_FAILED = "Failed to destroy voice connection for guild %s: %s"

    # Empty Channel
    EMPTY_CHANNEL_SCHEDULED = "Voice channel in guild %s is empty, leaving in %.0fs"
    EMPTY_CHANNEL_CANCELLED = "Cancelled empty-channel timer for guild %s"
    EMPTY_CHANNEL_OCCUPIED = "Voice channel in guild %s is no longer empty, keeping session"
    EMPTY_CHANNEL_LEAVING = "Leaving empty voice channel in guild %s"

    # Audio Pipeline
    AUDIO_CACHE_HIT = "Using cached download %s"
    AUDIO_DOWNLOADING = "Downloading '%s' to %s"
    AUDIO_DOWNLOADED = "Downloaded '%s' (%d bytes)"
    AUDIO_TRANSCODING = "Transcoding %s to %s"
    AUDIO_TRANSCODE_CACHE_HIT = "Using cached transcode %s"
    AUDIO_TRANSCODE_FAILED = "Transcode of %s failed, falling back to original: %s"

    # Resolution/Search
    RESOLVE_URL = "Resolving URL %s"
    RESOLVE_SEARCH = "Searching for '%s'"
    RESOLVE_NO_RESULTS = "No results for '%s'"
    RESOLVE_DETAILS_FAILED = "Could not re-resolve '%s' for details, using search result"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info for %s"
    YTDLP_FAILED_SEARCH = "Search failed for query: %s"

    # Generation
    GENERATION_QUEUED = "Queued generation request (%d pending)"
    GENERATION_PROCESSING = "Processing generation request (%d remaining)"
    GENERATION_FAILED = "Generation request failed"
    GENERATION_RETRY = "Generation request failed (%s), retrying %d/%d in %.1fs"
    GENERATION_DELAY = "Waiting %.1fs before next generation request"
    GENERATION_QUEUE_DRAINED = "Generation queue drained"
    GENERATION_MALFORMED_LINE = "Skipping malformed backend line: %r"
    GENERATION_CLIENT_CLOSED = "Generation HTTP client closed"

    # Cache Operations
    CACHE_HIT = "Cache hit for prompt: %s"
    CACHE_MISS = "Cache miss for prompt: %s"
    CACHE_STORED = "Cached response for prompt: %s (%d chars)"
    CACHE_EVICTED = "Evicted oldest cache entry (size limit %d)"
    CACHE_EXPIRED = "Evicted expired cache entry for prompt: %s"
    CACHE_CLEARED = "Cleared %d response cache entries"

    # Streaming Replies
    REPLY_RATE_LIMITED = "Rate limited by Discord, retrying %d/%d in %.2fs"
    REPLY_UPDATE_FAILED = "Failed to update streaming reply: %s"
    REPLY_FINAL_UPDATE_FAILED = "Failed final update of streaming reply"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Music Assistant ({environment})"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guild(s)"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.0fs"
    BOT_CONTAINER_SHUTDOWN = "Container shut down"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %s"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Loaded %d cogs (%d failed)"

    # Bot Command Sync
    BOT_SYNCED_GUILD = "Synced %d commands to guild %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync commands to guild %s: %s"
    BOT_SYNCED_GLOBAL = "Synced %d commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"

    # Bot Error Handling
    BOT_COMMAND_ERROR = "Error executing command %s: %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message"

    # Cog Lifecycle
    COG_LOADED = "%s loaded"
    COG_UNLOADED = "%s unloaded"

    # Gateway Events
    GATEWAY_CONNECTED = "WebSocket connected"
    GATEWAY_DISCONNECTED = "WebSocket disconnected"
    GATEWAY_RESUMED = "WebSocket session resumed"
    GUILD_JOINED = "Joined guild: %s (%s)"
    GUILD_LEFT = "Left guild: %s (%s)"
    GUILD_LEFT_CLEANUP_FAILED = "Could not stop playback after leaving guild %s: %s"
    BOT_VOICE_MOVED = "Bot voice state in guild %s: %s -> %s"

    # Commands
    COMMAND_EXECUTED = "Command %s executed by %s in %.1fms"
    COMMAND_COOLDOWN = "Command %s on cooldown for %s (%.1fs left)"
    STATS_FAILED = "Error getting stats"
    ASK_FAILED = "Error answering question from %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are shown directly to users in Discord.
    Keep them concise, friendly, and include appropriate emoji.
    """

    # Playback Results
    SUCCESS_SKIPPED = "⏭️ Skipped the current song!"
    SUCCESS_STOPPED = "⏹️ Stopped the music and cleared the queue!"
    SUCCESS_PAUSED = "⏸️ Paused the music!"
    SUCCESS_RESUMED = "▶️ Resumed the music!"
    SUCCESS_VOLUME_SET = "🔊 Volume set to {volume}%!"
    SUCCESS_LOOP_ENABLED = "🔁 Loop mode enabled!"
    SUCCESS_LOOP_DISABLED = "🔁 Loop mode disabled!"

    # Playback Errors
    STATE_NEED_TO_BE_IN_VOICE = "❌ You need to be in a voice channel to use this command!"
    STATE_NOTHING_PLAYING = "❌ Nothing is currently playing!"
    STATE_QUEUE_EMPTY = "❌ The queue is empty!"
    ERROR_MEMBER_CANNOT_CONNECT = "❌ You need permission to connect to this voice channel!"
    ERROR_BOT_CANNOT_CONNECT = "❌ I need permission to connect to this voice channel!"
    ERROR_BOT_CANNOT_SPEAK = "❌ I need permission to speak in this voice channel!"
    ERROR_CHANNEL_FULL = "❌ This voice channel is full!"
    ERROR_SONG_NOT_FOUND = "❌ Could not find any songs with that query!"
    ERROR_COULD_NOT_JOIN_VOICE = "❌ Could not join your voice channel. Please try again later."
    ERROR_INVALID_VOLUME = "❌ Volume must be between 0 and 100!"
    ERROR_PLAY_FAILED = "❌ An error occurred while trying to play the song!"
    ERROR_SERVER_ONLY = "❌ This command can only be used in a server."
    ERROR_MISSING_QUERY = "❌ Please provide a song name or URL to play."

    # Notices
    NOTICE_CONNECTION_LOST = (
        "❌ **Voice connection lost and could not be restored.** "
        "Use the play command again to reconnect."
    )
    NOTICE_PLAY_FAILED_DESCRIPTION = "Failed to play **{title}**"
    NOTICE_PLAY_FAILED_DETAIL = "Could not create audio stream. Please try another song."
    NOTICE_LEFT_EMPTY_CHANNEL = "I left the voice channel because it was empty for too long."
    NOTICE_REJOIN_HINT = "Use the `/play` command when you want me to rejoin!"

    # AI Answers
    ASK_THINKING = "🤔 Thinking..."
    ASK_CONTINUING = "_Continuing..._"
    ASK_DONE_MARKER = "✅ **Done**"
    ASK_DONE_FALLBACK = "✅ **Done** (Response completed)"
    ASK_NO_RESPONSE = "❌ No response generated. Please try again."
    ASK_MISSING_QUESTION = "❌ Please provide a question to ask the AI assistant."
    ASK_FAILED = (
        "❌ Sorry, I encountered an error while processing your question. "
        "Please try again later."
    )

    # Info Commands
    PING_PENDING = "Pinging..."
    PING_RESULT = "🏓 Pong! Latency is {latency_ms}ms. API Latency is {api_latency_ms}ms"
    INVITE_NOT_CONFIGURED = (
        "❌ Bot invite link is not configured. Please contact the bot administrator."
    )
    HELP_DESCRIPTION = "Use `{prefix}help [command]` for more info about a specific command."
    HELP_COMMAND_TITLE = "Command: {name}"
    HELP_NO_DESCRIPTION = "No description"
    HELP_UNKNOWN_COMMAND = "❌ Command `{name}` not found."
    STATS_DESCRIPTION = "Real-time performance metrics for the bot"
    STATS_FOOTER = "Performance metrics are reset on bot restart"
    INVITE_DESCRIPTION = "[Click here to invite me to your server]({url})"
    STATS_FAILED = "❌ Sorry, I encountered an error while getting statistics."

    # Generic Errors
    ERROR_COMMAND_FAILED = "There was an error executing that command!"
    ERROR_COOLDOWN = "⏳ Please wait {seconds:.1f}s before using `{command}` again."
    ERROR_MISSING_ARGUMENT = "❌ Missing argument: `{name}`."

    # Embed Titles
    TITLE_ADDED_TO_QUEUE = "🎵 Added to Queue"
    TITLE_NOW_PLAYING = "🎵 Now Playing"
    TITLE_MUSIC_QUEUE = "🎵 Music Queue"
    TITLE_PLAY_ERROR = "❌ Error Playing Song"
    TITLE_LEFT_CHANNEL = "👋 Left Voice Channel"
    TITLE_HELP = "🤖 Bot Commands"
    TITLE_INVITE = "🤖 Bot Invite Link"
    TITLE_STATS = "📊 Bot Performance Statistics"

    # Embed Fields
    FIELD_DURATION = "Duration"
    FIELD_REQUESTED_BY = "Requested by"
    FIELD_POSITION = "Position in queue"
    FIELD_CURRENT_QUEUE = "Current Queue"
    FIELD_ERROR = "Error"
    FIELD_INFO = "ℹ️ Info"
    FIELD_AVAILABLE_COMMANDS = "Available Commands"
    FIELD_MUSIC_COMMANDS = "🎵 Music Commands"
    FIELD_USAGE = "Usage"
    FIELD_ALIASES = "Aliases"
    FIELD_COOLDOWN = "Cooldown"
    FIELD_UPTIME = "⏱️ Uptime"
    FIELD_COMMANDS_EXECUTED = "🚀 Commands Executed"
    FIELD_AVG_RESPONSE = "⚡ Avg Response Time"
    FIELD_ERRORS = "❌ Errors"
    FIELD_CACHE_HIT_RATE = "💾 Cache Hit Rate"
    FIELD_CACHE_HITS = "📈 Cache Hits"
    FIELD_MEMORY = "🧠 Memory"
    FIELD_SESSIONS = "🔊 Active Sessions"
    QUEUE_DESCRIPTION = "**{count} songs in queue**"
    QUEUE_ENTRY = "{index}. **{title}** - {duration} ({requested_by})"
    QUEUE_MORE = "And {remaining} more songs..."
