from arthub.models.user import User
from arthub.models.artwork import Artwork, ArtworkLike
from arthub.models.cart import Cart, CartItem
from arthub.models.order import Order
from arthub.models.order_item import OrderItem
from arthub.models.order_event import OrderEvent
from arthub.models.comment import Comment, CommentLike
from arthub.models.follow import Follow
from arthub.models.message import Conversation, Message
from arthub.models.exhibition import Exhibition, ExhibitionRegistration
from arthub.models.exhibition_access import ExhibitionAccess
from arthub.models.virtual_exhibition import VirtualExhibition, VirtualExhibitionAttendee

# add ALL models here
