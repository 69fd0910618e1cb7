from models.auth import User, ClientSession
from models.base import College, Confession, Comment, Like, DirectMessage, ChatRoom, ChatMessage
from models.vip import UserTokens, VipMembership, MarketplaceItem, TokenTransaction, VipPurchase
