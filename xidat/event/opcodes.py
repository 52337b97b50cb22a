"""
Event Opcodes — registry of event VM instruction definitions.

Each opcode (0x00-0xD9) maps to a description and the candidate total sizes
of the instruction (opcode byte included). Many handlers have several
sub-modes with different lengths, so an instruction's size is not always
knowable from the opcode alone; resolve_size() applies the heuristics:

1. Exactly one candidate size: use it
2. Lookahead: a candidate is plausible if the instruction ends exactly at
   the series end, or the byte right after it is itself a valid opcode.
   Exactly one plausible candidate wins.
3. Per-opcode resolver keyed on the first parameter byte and/or the
   instructions already decoded in the same series
4. Give up (None) — the caller keeps the series as raw bytes

Descriptions follow atom0s' XiEvents notes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence

from xidat.config import CodecConfig, DEFAULT_CONFIG

log = logging.getLogger(__name__)

EMPTY_OPCODE = 0xFF  # explicit "no instruction" marker for zero-length series
MIN_OPCODE = 0x00
MAX_OPCODE = 0xD9

REFERENCE_URL = "https://github.com/atom0s/XiEvents/blob/main/Event%20DAT%20Structures.md"


@dataclass
class EventOpcode:
    """One decoded instruction: opcode byte + parameter bytes."""
    opcode: int
    params: bytes = b""

    @property
    def size(self) -> int:
        return 0 if self.is_empty else 1 + len(self.params)

    @property
    def is_valid(self) -> bool:
        return is_valid_opcode(self.opcode)

    @property
    def is_empty(self) -> bool:
        return self.opcode == EMPTY_OPCODE and not self.params

    def to_bytes(self) -> bytes:
        if self.is_empty:
            return b""
        return bytes([self.opcode]) + self.params

    def __repr__(self) -> str:
        return f"EventOpcode(0x{self.opcode:02X}, params={self.params.hex()})"


# (opcode, first param bytes up to end of series, previous instructions) -> total size
SizeResolver = Callable[[int, bytes, Sequence[EventOpcode]], "int | None"]


@dataclass(frozen=True)
class OpcodeDef:
    """Definition of a known event opcode."""
    opcode: int
    description: str
    sizes: tuple[int, ...]
    resolver: SizeResolver | None = None
    url: str = REFERENCE_URL

    @property
    def is_fixed(self) -> bool:
        return len(self.sizes) == 1


def is_valid_opcode(value: int) -> bool:
    return MIN_OPCODE <= value <= MAX_OPCODE


# ---- Size resolvers ----
# `data` starts at the first parameter byte (the opcode is already consumed).

def _resolve_0x1f(opcode: int, data: bytes, previous: Sequence[EventOpcode]) -> int | None:
    if not data:
        return None
    return {0x00: 8, 0x01: 2}.get(data[0])  # init / update mode


def _alternating(first: int, second: int) -> SizeResolver:
    """Opcodes issued in start/end pairs within a series."""
    def resolver(opcode: int, data: bytes, previous: Sequence[EventOpcode]) -> int | None:
        calls = sum(1 for op in previous if op.opcode == opcode)
        return first if calls % 2 == 0 else second
    return resolver


def _resolve_0x79(opcode: int, data: bytes, previous: Sequence[EventOpcode]) -> int | None:
    if len(data) < 2:
        return None
    return {0: 10, 1: 12, 2: 10}.get(data[0])


_RESOLVERS: dict[int, SizeResolver] = {
    0x1F: _resolve_0x1f,
    0x46: _alternating(2, 4),   # camera lock / unlock
    0x47: _alternating(10, 2),  # player position update / commit
    0x79: _resolve_0x79,
}


# ---- Registry ----

_TABLE: list[tuple[int, tuple[int, ...], str]] = [
    (0x00, (1,), "Ends the current ReqStack execution; resetting it back to defaults."),
    (0x01, (3,), "Directly sets the ExecPointer position."),
    (0x02, (8,), "Handles multiple types of if conditional statements."),
    (0x03, (5,), "Gets a value then stores it."),
    (0x04, (3,), "Deprecated. This opcode appears to be deprecated, it does nothing."),
    (0x05, (3,), "Sets a value to 1."),
    (0x06, (3,), "Sets a value to 0."),
    (0x07, (5,), "Adds two values then stores the result."),
    (0x08, (5,), "Subtracts two values then stores the result."),
    (0x09, (5,), "Sets a bit flag value then stores the result."),
    (0x0A, (5,), "Clears a bit flag value then stores the result"),
    (0x0B, (3,), "Increments a value then store it."),
    (0x0C, (3,), "Decrements a value then store it."),
    (0x0D, (5,), "Gets the bitwise AND result of two values and stores it."),
    (0x0E, (5,), "Gets the bitwise OR result of two values and stores it."),
    (0x0F, (5,), "Gets the bitwise XOR result of two values and stores it."),
    (0x10, (5,), "Gets the bitwise left-shift result of two values and stores it."),
    (0x11, (5,), "Gets the bitwise right-shift result of two values and stores it."),
    (0x12, (3,), "Generates a random number via rand() and stores it."),
    (0x13, (5,), "Generates a random number via rand(), with a given remainder, and stores it."),
    (0x14, (5,), "Gets the product of two values and stores it."),
    (0x15, (5,), "Gets the quotient of two values and stores it."),
    (0x16, (7,), "Performs a sin operation on two values and stores the result."),
    (0x17, (7,), "Performs a cos operation on two values and stores the result."),
    (0x18, (7,), "Performs an atan2 operation on two values and stores the result."),
    (0x19, (5,), "Reads two values and stores them in flipped order. (Endian swap.)"),
    (0x1A, (3,), "Jumps to a new position in the event data."),
    (0x1B, (1,), "Returns from the most recent jump on the JumpStack."),
    (0x1C, (3,), "Sets, or updates (decreases), the current ReqStack[RunPos].WaitTime value."),
    (0x1D, (3,), "Loads and prints an event message to chat, using EntityTargetIndex[1] as the speaker."),
    (0x1E, (5,), "Tells an entity to look at another entity and begin 'talking'. (This puts the 'talking' entity into an animation where their mouth moves.)"),
    (0x1F, (2, 8), "Updates the event position information."),
    (0x20, (2,), "Sets the CliEventUcFlag flag value. (This flag is used to lock the player from controlling their character.)"),
    (0x21, (1,), "Sets the EventExecEnd flag value to 1."),
    (0x22, (2,), "Calls XiAtelBuff::SetEventHideFlag for the current event entity."),
    (0x23, (1,), "Waits for the local player to interact with a dialog message."),
    (0x24, (7,), "Creates a dialog window with selectable options for the player to choose from."),
    (0x25, (1,), "Waits for a dialog select (created by opcode 0x0024) to be made by the player."),
    (0x26, (1,), "Yields the event VM. Note: This opcode may be deprecated. Since it only ever sets the RetFlag the opcode will never advance further leaving it in an endless self-handled cycle each time the VM is ticked."),
    (0x27, (7,), "Calls a helper FUNC_REQSet which in turn calls XiEvent::ReqSet after checking some conditions."),
    (0x28, (7,), "Similar to opcode 0x0027, but with extra checks/conditions. The function starts by checking for the current ReqStack[RunPos].ReqFlag being set, then will do a similar check setup to FUNC_REQSet but will end with calling XiEvent::GetReqStatus instead."),
    (0x29, (7,), "Similar to opcode 0x0028."),
    (0x2A, (6,), "Similar to opcode 0x0028."),
    (0x2B, (7,), "Loads and prints an event message with the given entity as the speaker. This handler works similar to 0x001D, however, the opcode holds the entity information used as the speaker."),
    (0x2C, (13,), "Creates and loads a CMoSchedularTask on the desired entity. (Appears to set an entity action.)"),
    (0x2D, (13,), "Creates and loads a zone based CMoSchedularTask on the desired entities. (Appears to schedule a zone action.)"),
    (0x2E, (1,), "Sets the CliEventCancelSetData flag. If CliEventCancelSetFlag is set, also sets the CliEventCancelFlag flag."),
    (0x2F, (6,), "Adjusts the given entities Render.Flag0 value."),
    (0x30, (1,), "Sets the ucoff_continue flag to 0."),
    (0x31, (2, 10), "Updates the event position information."),
    (0x32, (3,), "Sets the ExtData[1]->MainSpeed value."),
    (0x33, (2,), "Adjusts the event entities Render.Flags0 value."),
    (0x34, (3,), "Appears to load and unload an additional zone to be used with the event."),
    (0x35, (3,), "Similar to opcode 0x0034. This appears to load an additional zone for the event, however this handler does not have a call to XiZone::Close."),
    (0x36, (7,), "Updates the current ExtData[1]->EventPos information, calibrates the current event entity position then calls XiAtelBuff::CopyAllPosEvent and XiAtelBuff::ReqExecHitCheck."),
    (0x37, (9,), "Updates the current ExtData[1]->EventPos and ExtData[1]->EventDir[1] information, calibrates the current event entity position then calls XiAtelBuff::CopyAllPosEvent and XiAtelBuff::ReqExecHitCheck."),
    (0x38, (3,), "Sets the lower-word of CliEventModeLocal to a masked value. CliEventModeLocal is used to tell the client how the event should alter the client state."),
    (0x39, (3,), "Sets the current ExtData[1]->EventDir[1] value."),
    (0x3A, (7,), "Converts a float Yaw value to it's single byte representation and stores it."),
    (0x3B, (11,), "Gets the current position of the given entity (or uses the ExtData[1]->EventPos depending on flags) and stores it."),
    (0x3C, (7,), "Compares two values (using a shift). If condition is met, sets a bit flag and stores the result."),
    (0x3D, (7,), "Compares two values (using a shift). If condition is met, clears a bit flag and stores the result."),
    (0x3E, (7,), "Tests if a bit is set. Adjusts the ExecPointer based on the state of the flag."),
    (0x3F, (7,), "Calculates the remainder of two values and stores the result."),
    (0x40, (9,), "Sets a bit flag value and stores it. One usage of this opcode is to tell the client which dialog menu options are enabled/available."),
    (0x41, (9,), "Gets a bit flag value and stores it. One usage of this opcode is to tell the client which dialog menu options are enabled/available."),
    (0x42, (1,), "Sets the CliEventCancelSetData flag to 0. If CliEventCancelSetFlag is set, then CliEventCancelFlag is also set to 0."),
    (0x43, (2,), "Used to tell the server the server when the client has updated an event or has completed it."),
    (0x44, (5,), "Tests if the given entity is valid. Adjusts the ExecPointer based on the result."),
    (0x45, (17,), "Loads and starts a scheduled task with the given two entities."),
    (0x46, (2, 4), "Enables and disables the player camera control. Also disables rendering some menus to allow the game to play cutscenes without unneeded info on screen."),
    (0x47, (2, 10), "Updates the players location during an event. This opcode will send an 0x005C packet to the server to inform it of your position change."),
    (0x48, (3,), "Loads and prints an event message to chat, without a speaker entity."),
    (0x49, (7,), "Loads and prints an event message to chat, without a speaker entity."),
    (0x4A, (9,), "Tells an entity to look at another entity."),
    (0x4B, (7,), "Updates the given entities yaw direction."),
    (0x4C, (1,), "Sets the event entities StatusEvent to 8 if a specific Render.Flags0 bit is not set. (Open door.)"),
    (0x4D, (1,), "Sets the event entities StatusEvent to 9 if a specific Render.Flags0 bit is not set. (Close door.)"),
    (0x4E, (6,), "Sets the entities event hide flag within Render.Flags0."),
    (0x4F, (3,), "Sets the event entities StatusEvent to the given value if a specific Render.Flags0 bit is not set."),
    (0x50, (13,), "Ends a CMoSchedularTask."),
    (0x51, (13,), "Ends a zone based CMoSchedularTask."),
    (0x52, (15,), "Ends a CMoSchedularTask. (Load / Main)"),
    (0x53, (13,), "Waits for the given entities schedular to finish its current action."),
    (0x54, (13,), "Waits for the zone schedular to finish its current action."),
    (0x55, (15,), "Waits for the Main/Load schedular to finish its current action."),
    (0x56, (5,), "Deprecated. This opcode does not do anything with the values it reads anymore. This appears to be deprecated."),
    (0x57, (3,), "Creates a frame delay from the current frame delay value and stores it."),
    (0x58, (3,), "Yields the event VM."),
    (0x59, (4, 6, 7, 8), "Handles multiple cases regarding updating an entities data for events."),
    (0x5A, (2, 8), "Updates the event position information."),
    (0x5B, (15, 17), "Loads an extended schedular task."),
    (0x5C, (4, 6), "Handles multiple cases regarding the music player."),
    (0x5D, (5,), "Sets, or eases, the current playing music to a new volume."),
    (0x5E, (5,), "Appears to stop the event entities current action and reset them back to an idle motion."),
    (0x5F, (2, 7, 14, 16, 18), "This handler has a few cases, most of which call other opcode handlers and react based on their returns."),
    (0x60, (2, 4, 6), "Handler with multiple use cases. The default case where the opcode was two bytes long was deprecated and just skipped now. Adjusts the event entities Render.Flags1 value."),
    (0x61, (2,), "Adjusts the event entities Render.Flags2 value."),
    (0x62, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0x63, (3,), "Sets the event entity to play an animation then waits for it to complete."),
    (0x64, (11,), "Calculates and stores the distance between the given points."),
    (0x65, (11,), "Calculates and stores the 3D distance between the given entities."),
    (0x66, (15, 17), "Handler that calls the same helper call as opcode 0x005B, just with a different arguments."),
    (0x67, (5,), "Tells the client to hide the entire HUD UI elements during the cutscene. (ie. The compass, status icons, chat, menus, etc.)"),
    (0x68, (1,), "Tells the client to unhide the entire HUD UI elements. (ie. The compass, status icons, chat, menus, etc.)"),
    (0x69, (4,), "Sets the sound volume of the desired sound type."),
    (0x6A, (4,), "Changes the sound volume of the desired sound type."),
    (0x6B, (9,), "Appears to stop the given entities current action and reset them back to an idle motion."),
    (0x6C, (9,), "Fades an enities color in and out. This can be used to both set just the alpha of the entity, but also the color. This works in stages to allow the color to fade in and/or out smoothly, or immediately, depending on the time values set."),
    (0x6D, (7,), "Deprecated. This opcode appears to be deprecated, it does nothing."),
    (0x6E, (7,), "Sets the given entity to play an emote animation."),
    (0x6F, (1,), "Delays the event VM execution until ReqStack[RunPos].WaitTime has reached 0. Used as a yieldable sleep call."),
    (0x70, (1,), "Checks the event entity for a render flag, yields if set. Otherwise, cancels the entity movement and advances."),
    (0x71, (2, 4, 6, 8, 10), "Handles the usage of string input from the player during events. Such as password prompts and similar."),
    (0x72, (4, 6, 10), "Appears to load event based weather information and update the weather accordingly for it."),
    (0x73, (11,), "Schedules tasks for casting magic on the two given entities."),
    (0x74, (2,), "Adjusts the event entities Render.Flags1 value."),
    (0x75, (4, 6, 8), "Loads a room and updates the players sub-region with the server."),
    (0x76, (5,), "Checks the given entities Render.Flags0 and Render.Flags3 and yields if successful."),
    (0x77, (5,), "Disables the game clock and sets the client to a specific time for the event. Can also set the weather at the same time."),
    (0x78, (1,), "Enables the game timer and resets the zone weather."),
    (0x79, (10, 12), "Used to look at / rotate towards another entity."),
    (0x7A, (2, 6, 7, 8), "Handles multiple entity conditions dependant on following event byte cases."),
    (0x7B, (5,), "Unsets the given entities talking status, setting their NpcSpeechFrame back to -1."),
    (0x7C, (5,), "Adjusts the given entities Render.Flags2 value."),
    (0x7D, (3,), "Loads and starts a scheduled task using the local player as the entity. (Appears to be used to display rank up animations.)"),
    (0x7E, (6, 8, 16, 18), "Multi-purpose opcode relating to chocobos and mounts."),
    (0x7F, (1,), "Waits for a dialog select to be made by the player."),
    (0x80, (5,), "Tests the given entity for several conditions. Yields or moves forward depending on the results. (Appears to be used to check if the entity is loading an action or similar.)"),
    (0x81, (6,), "Sets an unknown value in the given entities warp data."),
    (0x82, (7,), "Finds and hit tests a rect based on the current event entities position."),
    (0x83, (3,), "Gets and stores the current game time."),
    (0x84, (1,), "Adjusts the event entities Render.Flags3 value."),
    (0x85, (1,), "Opens a mog house sub-menu depending on the passed parameter."),
    (0x86, (6,), "Adjusts the given entities Render.Flags3 value."),
    (0x87, (2,), "Used for handling the generation of world passes. Sends 0x001B packets to handle the various world pass functionalities."),
    (0x88, (2,), "Used for handling the generation of world passes. Sends 0x001B packets to handle the various world pass functionalities."),
    (0x89, (3,), "Opens the desired map (ie. /map), preparing it for usage within the event. (ie. NPCs that mark your map/show you around.)"),
    (0x8A, (1,), "Closes the map window. (ie. after being opened via opcode 0x0089)"),
    (0x8B, (25,), "Sets, or updates, a marker point on the players map. (ie. Used by NPCs that help new players and mark your map.)"),
    (0x8C, (2, 8, 10, 12, 14), "This handler is used for multiple purposes, related to crafting. (ie. Requesting recipes, synth support, and similar.)"),
    (0x8D, (5,), "Opens the map window with the given properties. This handler is used mainly when an NPC opens your map but it is not with the sub-menus visible. Mainly to show an overview of the map with no extra bloat on screen or markings on the map."),
    (0x8E, (1,), "Sets the event entities event status to 45 if valid."),
    (0x8F, (1,), "Sets the event entities event status to 46 if valid."),
    (0x90, (1,), "Adjusts the event entities Render.Flags0 and Render.Flags1 values."),
    (0x91, (3,), "Sets the ExtData[1].MainSpeedBase value."),
    (0x92, (6,), "Adjusts the given entities Render.Flags3 value."),
    (0x93, (3,), "Appears to display an items information. (Perhaps the same manner with how crafting shows results?)"),
    (0x94, (6,), "Adjusts the given entities Render.Flags3 value."),
    (0x95, (3,), "Sets the event entity up for being an event based npc. Cleans up the event entities attachments."),
    (0x96, (1,), "Unsets the event entity from being an event based npc."),
    (0x97, (5,), "Saves the current zone WindBase and WindWidth values then sets new ones."),
    (0x98, (1,), "Yields if the zone is loading data, continues otherwise."),
    (0x99, (5,), "Yields if the given entity is playing an animation, continues otherwise."),
    (0x9A, (1,), "Yields until the music server is no longer reading data."),
    (0x9B, (1,), "Yields if the event entity is playing an animation, continues otherwise."),
    (0x9C, (3,), "Stores the client language id."),
    (0x9D, (6, 8, 9, 10, 23), "Handler that has multiple purposes, mainly focused around handling strings."),
    (0x9E, (2,), "Sets the PTR_RectEventSendFlag value."),
    (0x9F, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0xA0, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xA1, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xA2, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xA3, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xA4, (2,), "Adjusts the event entities Render.Flags3 value."),
    (0xA5, (2,), "Adjusts the event entities Render.Flags3 value."),
    (0xA6, (1, 4), "Requests the event map number from the server by sending a 0x00EB packet. Sets the PTR_RecvEventMapNumFlag to mark the client as awaiting for a response and then yields until it is unset."),
    (0xA7, (12, 4), "Waits for the server to respond to a client request. This is used with battlefield registration NPCs. (ie. Dynamis, Moblin Maze Mongers, Salvage, etc.)"),
    (0xA8, (6,), "Opens the map (if requested), unlocks and renames markers."),
    (0xA9, (3,), "Disables the game time and sets it to a specific given time."),
    (0xAA, (17,), "Gets a value to be used as a Vana'diel timestamp. Converts that timestamp into the various time parts and stores them."),
    (0xAB, (2, 4, 6), "Handles various sub-cases; mostly dealing with altering entity render flags."),
    (0xAC, (4, 6, 8), "Handles multiple sub-cases."),
    (0xAD, (12,), "Handler with multiple sub-cases, used to do various scheduler actions against the two given entities."),
    (0xAE, (6, 8, 10), "Handles multiple sub-cases. Doesn't seem to have any specific purpose."),
    (0xAF, (8,), "Gets and stores the camera position values."),
    (0xB0, (12,), "Loads and prints an event message to chat. Uses the given entities as the speaker and listener."),
    (0xB1, (4,), "Gets and stores the value of a flag. PTR_UnknownValue is part of the main app object which is initialized to 128. This valid doesn't seem to ever change, and has been the same since the original beta of the game. At this time, the purpose of this value is unknown."),
    (0xB2, (2, 4), "Handler has two modes. The first mode requests opening the delivery box. The second mode is to wait a certain amount of time, used to wait for the delivery box to open."),
    (0xB3, (2, 4, 14, 18), "This handler is used for dealing with the rankings boards. For example, the fishing rank boards with Chenon in Selbina."),
    (0xB4, (2, 3, 4, 6, 12, 20), "Handler with multiple sub-usages."),
    (0xB5, (4,), "Sets the current event entities name."),
    (0xB6, (2, 4, 6, 14, 16, 20), "Handler with multiple sub-usages. Related to entity looks / gear visuals."),
    (0xB7, (8, 10), "Handler with multiple sub-usages."),
    (0xB8, (27,), "Opens the map (if requested), adds and sets markers."),
    (0xB9, (8,), "Opens the map (if requested), edits and renames a marker. (Name is taken from the event Read buffer.)"),
    (0xBA, (13,), "Obtains the given entity, if valid, attempts to calibrate its position then calls XiAtelBuff::CopyAllPosEvent and XiAtelBuff::ReqExecHitCheck."),
    (0xBB, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0xBC, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xBD, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xBE, (3,), "Stores the current ReqStack[RunPos].WhoServerId value."),
    (0xBF, (8, 10), "Handler that is used for chocobo racing. This handler has debug messages left in, so it can be translated to actual opcode names."),
    (0xC0, (3,), "Adjusts the event entities Render.Flags3 value."),
    (0xC1, (5,), "Obtains the given entity, tests it for something. If successful, then the last action is killed and its resp data is deleted."),
    (0xC2, (2, 4, 6), "The purpose of this opcode is currently unknown. This makes use of the internal party state object, checking for flags/values. These check if a flag is set that is more recently added to the party structure."),
    (0xC3, (7,), "Copies a string value into an unknown buffer array."),
    (0xC4, (11,), "Handler that calls the same helper call as opcode 0x0073, just with a different arguments."),
    (0xC5, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0xC6, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xC7, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xC8, (7,), "Opens the map window with the given parameters."),
    (0xC9, (1,), "Enables the game timer."),
    (0xCA, (1,), "Deprecated. No handler exists for this opcode at this time."),
    (0xCB, (1,), "Deprecated. No handler exists for this opcode at this time."),
    (0xCC, (4, 6, 10, 14), "This opcode appears to be used to open and display information windows for various things. Mainly items."),
    (0xCD, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0xCE, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xCF, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xD0, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0xD1, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xD2, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xD3, (6,), "Gets the given entity and calls a helper function that clears its motion queue lists."),
    (0xD4, (2, 6, 8, 12), "Handles multiple sub-opcodes. These appear to be related to opening the map and querying the user for input."),
    (0xD5, (17,), "Handler that calls the same helper call as opcode 0x0045, just with a different second argument."),
    (0xD6, (15,), "Handler that calls the same helper call as opcode 0x0055, just with a different second argument."),
    (0xD7, (15,), "Handler that calls the same helper call as opcode 0x0052, just with a different second argument."),
    (0xD8, (6, 8, 12), "Sets the ExtData[1]->EventDir information for the given entity."),
    (0xD9, (2,), "Sets an unknown flag value."),
]

KNOWN_OPCODES: dict[int, OpcodeDef] = {
    opcode: OpcodeDef(opcode, description, sizes, _RESOLVERS.get(opcode))
    for opcode, sizes, description in _TABLE
}


def get_opcode(opcode: int) -> OpcodeDef | None:
    return KNOWN_OPCODES.get(opcode)


def describe(opcode: int) -> str:
    odef = KNOWN_OPCODES.get(opcode)
    if odef is None:
        return "empty" if opcode == EMPTY_OPCODE else "unknown"
    return odef.description


def _lookahead(series: bytes, start: int, sizes: tuple[int, ...]) -> list[int]:
    """Candidate sizes that end the series exactly or land on a valid opcode."""
    plausible = []
    for size in sizes:
        end = start + size
        if end == len(series) or (end < len(series) and is_valid_opcode(series[end])):
            plausible.append(size)
    return plausible


def resolve_size(
    series: bytes,
    start: int,
    previous: Sequence[EventOpcode],
    config: CodecConfig = DEFAULT_CONFIG,
) -> int | None:
    """Determine the total size of the instruction at series[start].

    `series` holds exactly the bytes of one event series. Returns None when
    the size cannot be determined with confidence.
    """
    opcode = series[start]
    odef = KNOWN_OPCODES.get(opcode)
    if odef is None:
        return None

    if odef.is_fixed:
        return odef.sizes[0]

    if config.lookahead:
        plausible = _lookahead(series, start, odef.sizes)
        if len(plausible) == 1:
            return plausible[0]

    if config.resolvers and odef.resolver is not None:
        size = odef.resolver(opcode, series[start + 1:], previous)
        if size is None:
            log.debug("Resolver for 0x%02X rejected param byte at +%d", opcode, start + 1)
        return size

    log.debug("Opcode 0x%02X at +%d is ambiguous: sizes %s", opcode, start, odef.sizes)
    return None
