"""Centralized message constants for error messages, logging, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Queue
    QUEUE_NOT_FOUND = "There is no queue for this server."
    TRACK_NOT_FOUND = "No track found for '{value}'."
    NULL_TRACK = "Cannot add an empty track to the queue."
    NULL_CHANNEL = "Channel reference cannot be empty."

    # Settings
    INVALID_VOLUME = "Volume must be a number greater than 0 (got {value!r})."
    UNKNOWN_FILTER = "Unknown filter '{name}'."
    INVALID_FILTER_TYPE = "Filter must be a name, not a number (got {value!r})."

    # Search / selection
    SEARCH_QUERY_REQUIRED = "A search query or URL is required."
    NO_SEARCH_RESULTS = "Nothing found for '{query}'."
    SOURCE_UNAVAILABLE = "Source is unavailable for '{query}'."
    SELECTION_TIMEOUT = "No track was selected within {seconds} seconds."
    INVALID_SELECTION = "Selection must be a number between 1 and {maximum} (got {value!r})."

    # Voice
    VOICE_CHANNEL_NOT_FOUND = "That voice channel could not be found."
    VOICE_CONNECT_FAILED = "Could not connect to the voice channel."
    ALREADY_CONNECTED = "I'm already in a voice channel."
    NOT_CONNECTED = "I'm not in a voice channel."
    USER_NOT_IN_VOICE = "You need to be in a voice channel first."

    # Track

    # Lyrics
    LYRICS_NOT_FOUND = "No lyrics found for '{title}'."

    # Time
    TIMEZONE_REQUIRED = "datetime must be timezone-aware (UTC)"

    # Startup
    DISCORD_TOKEN_REQUIRED = "DISCORD_TOKEN environment variable is required"
    FFMPEG_REQUIRED = "FFmpeg must be installed to run in production"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."


class LogTemplates:
    """Log message templates, used with %-style logger arguments."""

    # Registry
    QUEUE_CREATED = "Created queue for guild %s"
    QUEUE_DELETED = "Deleted queue for guild %s"

    # Queue operations
    QUEUE_TRACKS_ADDED = "Added %d track(s) to queue in guild %s"
    QUEUE_REMOVED = "Removed track '%s' from queue in guild %s"
    QUEUE_SHUFFLED = "Shuffled queue in guild %s"
    QUEUE_ROTATED = "Rotated '%s' to the back of the queue in guild %s"
    QUEUE_ENDED = "Queue ended in guild %s"
    REPEAT_MODE_CHANGED = "Repeat mode changed to %s in guild %s"
    VOLUME_CHANGED = "Volume set to %s in guild %s"
    VOLUME_LIVE_APPLY_SKIPPED = "No active dispatcher in guild %s, volume stored only"

    # Playback
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_RETRY_FORBIDDEN = "Forbidden stream for '%s' in guild %s, retrying once"
    PLAYBACK_FAILED = "Playback error in guild %s (%s): %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_STALE_EVENT = "Ignoring stale %s event in guild %s (token %s, current %s)"
    PLAYBACK_FILTER_APPLIED = "Applied filter %s in guild %s, restarting '%s'"
    PLAYBACK_DISCARD_FAILED = "Failed to release unused stream in guild %s"
    TRACK_FINISHED = "Track finished: '%s' in guild %s"
    TRACK_SKIPPED = "Skipped track: '%s' in guild %s"
    TEARDOWN = "Tearing down queue in guild %s (%s)"
    TEARDOWN_END_FAILED = "Failed to end dispatcher during teardown in guild %s"
    TEARDOWN_LEAVE_FAILED = "Failed to leave voice during teardown in guild %s"

    # Voice
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CONNECTION_LOST = "Voice connection lost in guild %s"
    VOICE_MOVED = "Moved to voice channel %s in guild %s"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    TRACK_ENDED = "Track ended in guild %s (error: %s)"

    # Resolver
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info for %s"
    YTDLP_FAILED_SEARCH = "Search failed for '%s'"
    YTDLP_NO_STREAM_URL = "No stream URL for '%s'"

    # Selection
    SELECTION_TIMEOUT = "Track selection timed out after %ss in guild %s"

    # Lyrics
    LYRICS_LOOKUP = "Looking up lyrics for '%s'"
    LYRICS_REQUEST_FAILED = "Lyrics request failed for '%s': %s"

    # Events
    EVENT_SUBSCRIBED = "Subscribed handler to: %s"
    EVENT_UNSUBSCRIBED = "Unsubscribed handler from %s"
    EVENT_NO_HANDLERS = "No handlers for %s"
    EVENT_PUBLISHING = "Publishing %s to %d handlers"
    EVENT_HANDLER_ERROR = "Error in handler for %s: %s"

    # Bot lifecycle
    BOT_STARTING = "Starting bot in {environment} mode"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_READY = "Logged in as %s (%s)"
    BOT_STOPPED = "Bot stopped"
    BOT_AUDIO_DEFAULTS = "Audio defaults: volume %s, search limit %s, selection timeout %ss"
    BOT_FFMPEG_MISSING = "FFmpeg executable '%s' not found; voice playback will fail"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_COMMAND_ERROR = "Command error in '%s': %s"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot"
    BOT_VOICE_DISCONNECT_FAILED = "Failed to disconnect voice client in guild %s: %s"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_NOTICE_SEND_FAILED = "Failed to send notice to channel %s: %s"


class DiscordUIMessages:
    """User-facing Discord messages and responses."""

    NOW_PLAYING = "🎵 Now playing: **{title}** `[{duration}]`"
    TRACK_QUEUED = "➕ Added **{title}** to the queue (position {position})."
    TRACKS_QUEUED = "➕ Added {count} tracks to the queue."
    SELECT_TRACK = "🔍 Pick a track by sending its number (1-{count}):\n{choices}"

    ACTION_SKIPPED = "⏭️ Skipped **{title}**."
    ACTION_SKIPPED_END = "⏭️ Skipped **{title}**. The queue is now empty."
    ACTION_STOPPED = "⏹️ Stopped playback and cleared the queue."
    ACTION_PAUSED = "⏸️ Paused playback."
    ACTION_RESUMED = "▶️ Resumed playback."
    ACTION_ALREADY_PAUSED = "Playback is already paused."
    ACTION_ALREADY_PLAYING = "Playback is already running."
    ACTION_SHUFFLED = "🔀 Shuffled the queue."
    ACTION_VOLUME_SET = "🔊 Volume set to {volume}."
    ACTION_FILTER_SET = "🎛️ Filter set to **{name}**."
    ACTION_REPEAT_MODE = "🔁 Repeat mode: **{mode}**"
    ACTION_TRACK_REMOVED = "🗑️ Removed **{title}**. {remaining} track(s) left."
    ACTION_JOINED = "👋 Joined **{channel}**."
    ACTION_LEFT = "👋 Left the voice channel."
    ACTION_SKIP_PENDING = "⏳ The next track is still starting, try again in a moment."
    ACTION_NOTHING_STOPPED = "Nothing to stop."

    NOTICE_QUEUE_ENDED = "✅ The queue has finished."
    NOTICE_PLAYBACK_FAILED = "⚠️ Could not play **{title}**: {message}"
    NOTICE_CONNECTION_LOST = "🔌 Lost the voice connection, the queue was cleared."

    QUEUE_TITLE = "📋 Queue ({count} tracks)"
    QUEUE_EMPTY = "The queue is empty."
    FILTERS_TITLE = "🎛️ Available filters"
    LYRICS_TITLE = "🎤 Lyrics: {title}"
    PROGRESS = "{bar}  [{percent}%]"
    NOW_PLAYING_FIELD_DURATION = "⏱️ Duration"
    NOW_PLAYING_FIELD_REQUESTER = "👤 Requested by"

    ERROR_COMMAND_FAILED = "❌ Command failed. See logs."
    ERROR_SERVER_ONLY = "This command can only be used in a server."
