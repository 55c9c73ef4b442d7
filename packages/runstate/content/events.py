"""
Event Definitions.

Display data for the narrative events: title, intro paragraphs and the INTRO
choices. Branching behavior for each event lives in the event handlers; this
module is read-only content.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class EventChoice:
    id: str
    label: str
    hint: str = ""


@dataclass(frozen=True)
class EventDef:
    id: str
    title: str
    intro: Tuple[str, ...]
    choices: Tuple[EventChoice, ...]

    def choice(self, choice_id: str) -> Optional[EventChoice]:
        for c in self.choices:
            if c.id == choice_id:
                return c
        return None


EVENT_HALLWAY_SHORTCUT = "hallway_shortcut"
EVENT_VENDING_MACHINE = "vending_machine_glitch"
EVENT_LIBRARY = "library_study_session"
EVENT_DETENTION = "detention_notice"
EVENT_SUBSTITUTE = "substitute_teacher"
EVENT_HIDDEN_ENCOUNTER = "hidden_encounter"
EVENT_CHEM_LAB = "chem_lab_spill"
EVENT_CHARGING_STATION = "charging_station"
EVENT_PRACTICE = "after_school_practice"
EVENT_WEIGHT_ROOM = "weight_room"
EVENT_POISON_EXTRACTION = "poison_extraction"
EVENT_ATTENDANCE = "attendance_office"
EVENT_POP_UP_VENDOR = "pop_up_vendor"
EVENT_EXAM_LADDER = "exam_week_ladder"
EVENT_VAULT = "vault"


EVENTS: Tuple[EventDef, ...] = (
    EventDef(
        EVENT_HALLWAY_SHORTCUT, "Hallway Shortcut",
        ("You spot a side hallway that looks like a shortcut.",
         "Six identical lockers line the corridor. It feels like a trap, but the rewards could be worth it."),
        (EventChoice("enter", "Take the shortcut", "A press-your-luck mini-event."),
         EventChoice("leave", "Stay on the main path", "Leave. Nothing happens.")),
    ),
    EventDef(
        EVENT_VENDING_MACHINE, "Vending Machine Glitch",
        ("A vending machine sits in a lonely alcove, its screen flickering between prices that make no sense.",
         "Something about the whole thing feels hacked. Or haunted."),
        (EventChoice("buy", "Buy (50g)", "Spend 50 gold to get a random consumable."),
         EventChoice("shake", "Shake it", "50%: get 2 consumables. 50%: take 10 damage."),
         EventChoice("leave", "Leave", "A hall monitor blocks the way. Answer a question to slip out.")),
    ),
    EventDef(
        EVENT_LIBRARY, "Library Study Session",
        ("You push into the library and the noise of the halls collapses into a soft hush.",
         "A stack of notes sits beside a desk lamp. A comfortable chair in the corner looks dangerously inviting."),
        (EventChoice("study", "Study", "Upgrade a card."),
         EventChoice("steal_notes", "Steal notes", "Gain Cheat Sheet. Add Pop Quiz."),
         EventChoice("nap", "Nap", "Heal 10 HP. Lose 30 gold."),
         EventChoice("leave", "Leave", "The librarian stops you. Answer a question to leave.")),
    ),
    EventDef(
        EVENT_DETENTION, "Detention Notice",
        ("A folded slip of paper is wedged into your locker.",
         "Someone saw something. The bottom is stamped with a room number and a time that feels way too soon."),
        (EventChoice("serve_detention", "Serve detention", "Gain a Trash Bin consumable."),
         EventChoice("bribe_staff", "Bribe staff (75g)", "Pay 75 gold to upgrade a card."),
         EventChoice("skip_gain_curse", "Avoid detention", "You dodge the room, but you take a Curse.")),
    ),
    EventDef(
        EVENT_SUBSTITUTE, "Substitute Teacher",
        ("A stranger stands at the front of the room with a stack of worksheets and no lesson plan.",
         "The room is restless. You can help, or you can weaponize the chaos."),
        (EventChoice("help_them", "Help them", "Gain an Answer Key."),
         EventChoice("cause_chaos", "Cause chaos", "Gain 75 gold. Add a random negative card."),
         EventChoice("leave", "Leave", "Slip out quietly, if you can answer a question.")),
    ),
    EventDef(
        EVENT_HIDDEN_ENCOUNTER, "Hidden Encounter",
        ("The hallway is quiet. Too quiet.",
         "Somewhere nearby you hear a faint scrape and a low growl."),
        (EventChoice("investigate", "Investigate the noise", "Face whatever is hiding here."),
         EventChoice("walk_away", "Keep walking", "Leave quietly. Nothing happens.")),
    ),
    EventDef(
        EVENT_CHEM_LAB, "Chem Lab Spill",
        ("A chemical stink hits you before you even reach the door.",
         "A beaker has shattered and green sludge crawls across the counter."),
        (EventChoice("trade_deodorant", "Trade Deodorant for a full heal", "Lose Deodorant, fully heal."),
         EventChoice("take_contagion", "Take Contagion", "Gain Contagion. Add Infestation."),
         EventChoice("take_toxic_booster", "Take Toxic Booster", "Gain Toxic Booster. Add Radiation."),
         EventChoice("leave", "Leave", "The fumes sting your eyes. Take 5 damage as you escape.")),
    ),
    EventDef(
        EVENT_CHARGING_STATION, "Charging Station",
        ("You find a row of wall chargers bolted into a metal cabinet.",
         "Every port is labeled, except one outlet that hums like it is alive."),
        (EventChoice("pay_150", "Pay (150g) for a Battery Pack", "Pay 150 gold to gain Battery Pack."),
         EventChoice("rip_it_out", "Rip it out", "Gain Battery Pack. Take 15 damage. Add Radiation."),
         EventChoice("overclock_it", "Overclock it", "Gain Overclock. Add Radiation."),
         EventChoice("leave", "Leave", "The station flashes a prompt. Answer a question to leave.")),
    ),
    EventDef(
        EVENT_PRACTICE, "After School Practice",
        ("The gym lights hum and flicker. Whistles echo. Shoes squeak.",
         "You can push harder, play it smart, or pretend you were never here."),
        (EventChoice("extra_reps", "Extra reps", "Gain Extra Swing. Take 10 damage."),
         EventChoice("defensive_strategy", "Defensive Strategy", "Lose 30 gold. Gain Dig In."),
         EventChoice("skip", "Skip practice", "Gain 50 gold. Add a Curse."),
         EventChoice("leave", "Leave", "Coach calls your name. Answer a question to slip out.")),
    ),
    EventDef(
        EVENT_WEIGHT_ROOM, "Weight Room",
        ("The weight room is louder than it should be.",
         "A rack of gear sits unattended. You can almost feel the power here."),
        (EventChoice("belt_up", "Belt Up", "Pay 75 gold. Gain Weight Belt."),
         EventChoice("sparring_partner", "Sparring Partner", "Take 20 damage. Gain Shield Conversion."),
         EventChoice("punching_bag", "Punching Bag", "Take 20 damage. Gain Unload."),
         EventChoice("leave", "Leave", "Answer a question to leave.")),
    ),
    EventDef(
        EVENT_POISON_EXTRACTION, "Poison Extraction",
        ("A back lab door hangs slightly open. A centrifuge spins on its own.",
         "Two vials sit in a tray: one clear, one ink-dark."),
        (EventChoice("extract_antidote", "Extract Antidote", "Take 12 damage. Gain Detox Extract."),
         EventChoice("extract_poison", "Extract Poison", "Gain Red Pen (event-only supply)."),
         EventChoice("leave", "Leave", "The door clicks behind you. Answer a question to get out.")),
    ),
    EventDef(
        EVENT_ATTENDANCE, "Attendance Office",
        ("The Attendance Office looks too clean, like a showroom pretending to be a workplace.",
         "A sign on the wall reads: ABSENCES MUST BE EXPLAINED."),
        (EventChoice("absence_note", "Absence Note (60g)", "Pay 60 gold to gain Absence Note."),
         EventChoice("apologize", "Apologize", "Heal 15 HP. Lose 30 gold."),
         EventChoice("forge_signature", "Forge Signature", "Gain 100 gold. Add 2 negatives."),
         EventChoice("leave", "Leave", "The hallway feels colder. Take 5 damage.")),
    ),
    EventDef(
        EVENT_POP_UP_VENDOR, "Pop-Up Vendor",
        ("A folding table has appeared in the hallway like it was always there.",
         "A hand-written sign reads: POP-UP VENDOR, TODAY ONLY."),
        (EventChoice("browse_wares", "Browse Wares", "Open an event shop with event-only stock."),
         EventChoice("mystery_bag", "Mystery Bag (30g)", "Pay 30 gold for 1 random base-game consumable (one-time)."),
         EventChoice("leave", "Leave", "No question gate.")),
    ),
    EventDef(
        EVENT_EXAM_LADDER, "Exam Week Ladder",
        ("A laminated chart is bolted to the wall: THE EXAM WEEK LADDER.",
         "Five rungs. Five questions. One reward, based on how far you climb before you slip."),
        (EventChoice("start", "Climb the Ladder", "Answer up to 5 questions. One wrong ends the climb."),
         EventChoice("leave", "Leave", "Back away slowly. No question gate.")),
    ),
    EventDef(
        EVENT_VAULT, "Gold Vault",
        ("You come across what looks like a vault door and decide to enter.",
         'You hear an ominous voice: "An offering, or face consequences."'),
        (EventChoice("offer_all_gold", "Offer all your gold", "Lose all gold, heal 15 HP."),
         EventChoice("trade_golden_pencil", "Trade the Golden Pencil", "Lose Golden Pencil, upgrade a card."),
         EventChoice("ultimate_offering", "Make the ultimate offering", "Lose all gold and Golden Pencil for an event-only Ultra Rare card."),
         EventChoice("leave", "Leave without offering", "Take 15 damage.")),
    ),
)
