# Importing the package registers every table on Base.metadata
from .profile import Profile
from .vehicle import Vehicle
from .task import Task
from .arb import VehicleArbRecord
from .message import Message
from .dropdown import DropdownSetting
