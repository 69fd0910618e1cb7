from schemas.common import (
    ApiModel, SessionOut, SessionResponse, SessionUpdateInput, DailyLimitResponse,
    CollegeOut, CollegeInput, ConfessionInput, ConfessionOut, ConfessionCreatedResponse,
    CommentInput, CommentOut, LikeResponse, SuccessResponse, PendingOverview
)
from schemas.messages import (
    DirectMessageInput, DirectMessageOut, DirectMessageReview,
    ChatRoomOut, ChatMessageInput, ChatMessageOut
)
from schemas.auth import (
    LoginInput, AdminOut, AuthResponse, MeResponse,
    AdminCreateInput, AdminUpdateInput, AdminStatusInput
)
from schemas.vip import (
    TokenBalanceOut, MembershipOut, MarketplaceItemOut, TransactionOut,
    PurchaseOut, PurchaseInput, PurchaseResponse, CheckoutInput
)
