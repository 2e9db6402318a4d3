# Part of Pizzabox - Licensed under GPL 3.0
# See LICENSE.md for details

"""
Bot Messages

Every user-facing string lives here so wording can change without touching code.

Placeholders in {braces} are filled with str.format(). Only the templates here
are parsed, so a song called "Live {2019}" is safe to pass as a value.

WARNING: Keep the placeholder names intact when rewording.
"""

MESSAGES = {
    # ===================================================================
    # LIBRARY ERRORS
    # ===================================================================
    'songs_folder_missing': "The songs folder does not exist. Please create the folder and add songs.",
    'library_empty': "The playlist is empty or contains unsupported file types. Add some songs to the folder first.",
    'folder_missing': "The folder does not exist. Please make sure the songs are in the correct location.",
    'folder_empty': "The folder is empty or contains unsupported file types. Add some songs to the folder first.",

    # ===================================================================
    # SONG SELECTION
    # ===================================================================
    'play_usage': "Usage: `{prefix}play <song id | filename>` (example: `{prefix}play 12` or `{prefix}play my song`)",
    'invalid_index': "Invalid song index: {number}. Please provide a number between 1 and {total}.",
    'no_match': "No exact or close match found for **{query}**. Please try again with a valid song ID or filename.",

    # ===================================================================
    # VOICE
    # ===================================================================
    'not_in_voice': "You need to be in a voice channel to play music!",
    'cant_connect': "❌ Can't join that channel: {error}",

    # ===================================================================
    # PLAYBACK
    # ===================================================================
    'now_playing': "🎵 Now playing: **{track}**",
    'band_started': "🎵 Playing songs from the Pizza Collection PizzaDAO House Band folder in random order!",
    'lobo_random': "🎵 Playing all songs from the songs/lobo folder in random order!",
    'lobo_album': "🎵 Playing Album {number} ({album}) from the songs/lobo folder in order!",
    'lobo_usage': "Usage: `{prefix}lobo` or `{prefix}lobo <albumNumber>` (example: `{prefix}lobo 2`)",
    'lobo_no_albums': "There are no albums in the songs/lobo folder.",
    'lobo_invalid_album': "Album {number} does not exist. Please choose a valid album number (1-{total}).",
    'mixtape_started': "🎵 Playing songs from the PizzaDAO Mixtape folder in random order!",

    # Sent when a finite session runs out of songs
    'track_finished': "Finished playing **{track}**.",
    'album_finished': "Finished Album {number} ({album}).",
    'mixtape_finished': "All songs from the mixtape have been played!",

    # Sent while a session keeps going after a bad track
    'playback_error': "An error occurred while playing a song: {error}",
    'playback_gave_up': "None of the songs could be played, so I stopped. Check the files and FFmpeg.",

    # ===================================================================
    # SKIP / STOP
    # ===================================================================
    'skip_nothing': "There are no songs playing or no songs in the queue.",
    'skipped': "⏭️ Skipped to the next song!",
    'stopped': "🛑 Stopped the music and disconnected from the voice channel.",
    'stop_not_connected': "I am not currently connected to a voice channel in this server.",

    # ===================================================================
    # PLAYLIST / ALBUM LISTINGS
    # ===================================================================
    'playlist_empty': "The playlist is empty. Add some songs to the folder first.",
    'playlist_header': "🎶 Playlist:",
    'playlist_title': "🎶 Playlist",
    'playlist_page_footer': "Page {page} of {pages}",
    'pagination_not_yours': "You can't interact with this menu!",
    'album_usage': "Usage: `{prefix}album <folder>`\nExample: `{prefix}album band`",
    'album_folder_missing': 'The folder "{folder}" does not exist. Please check the name and try again.',
    'playlist_file_missing': "The playlist.json file does not exist. Please run the /playlist command first.",
    'playlist_file_invalid': "Invalid playlist data. Please regenerate the playlist using the /playlist command.",
    'album_no_songs': 'No songs found in the folder "{folder}".',
    'album_title': "🎵 Album: {folder}",
    'album_title_cont': "🎵 Album: {folder} (cont.)",
    'album_footer_total': "Total songs: {total}",
    'album_footer_page': "Page {page}/{pages}",

    # ===================================================================
    # GENERIC
    # ===================================================================
    'error_generic': "There was an error executing that command!",
}

# Slash command descriptions (shown in Discord's command picker)
COMMAND_DESCRIPTIONS = {
    'play': "Plays a song from the playlist",
    'play_input': "The song ID or filename (excluding extension)",
    'band': "Plays songs from the Pizza Collection PizzaDAO House Band folder in random order",
    'lobo': "Plays songs from the lobo folder randomly or by specific album",
    'lobo_album': "Specify the album number",
    'mixtape': "Plays songs from the PizzaDAO Mixtape folder in random order",
    'skip': "Skips the current song and plays the next one in the queue",
    'stop': "Stops the current song and disconnects the bot from the voice channel",
    'album': "Displays the song IDs for the specified album (folder)",
    'album_folder': "The name of the folder to display songs from",
    'playlist': "Displays the playlist of available songs",
}

__all__ = ['MESSAGES', 'COMMAND_DESCRIPTIONS']
